"""HTTP-проверки доступности: интернет, healthz n8n и HTTPS домена."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import httpx

LOGGER = logging.getLogger(__name__)


class HttpProbe:
    """Проверяет, отвечает ли URL.

    Любой HTTP-ответ, включая редирект, считается доступностью; некорректный
    URL считается недоступным.
    """

    def __init__(self, client: Optional[httpx.Client] = None) -> None:
        self._client = client or httpx.Client()

    def reachable(self, url: str, timeout: float) -> bool:
        try:
            response = self._client.get(url, timeout=timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            LOGGER.debug("GET %s failed: %s", url, exc)
            return False
        LOGGER.debug("GET %s -> %s", url, response.status_code)
        return True

    def get_json(self, url: str, timeout: float) -> Optional[Any]:
        try:
            response = self._client.get(url, timeout=timeout)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            LOGGER.debug("GET %s failed: %s", url, exc)
            return None

    def download(self, url: str, destination: Path, timeout: float = 60) -> None:
        """Скачивает файл, следуя редиректам; ошибки HTTP поднимаются как httpx.HTTPError."""

        destination.parent.mkdir(parents=True, exist_ok=True)
        with self._client.stream("GET", url, timeout=timeout, follow_redirects=True) as response:
            response.raise_for_status()
            with destination.open("wb") as handle:
                for chunk in response.iter_bytes():
                    handle.write(chunk)

    def close(self) -> None:
        self._client.close()


def latest_compose_version(probe: HttpProbe, release_api: str, fallback: str) -> str:
    """tag_name последнего релиза docker/compose либо fallback."""

    payload = probe.get_json(release_api, timeout=10)
    if isinstance(payload, dict):
        tag = payload.get("tag_name")
        if isinstance(tag, str) and tag:
            return tag
    LOGGER.warning("Could not resolve latest docker-compose release, using %s", fallback)
    return fallback
