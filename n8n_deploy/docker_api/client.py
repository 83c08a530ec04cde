"""Обёртка над docker-py для локального Docker daemon."""

from __future__ import annotations

import logging
from typing import Any

import docker
from docker.errors import DockerException

from n8n_deploy.docker_api.exceptions import DockerAPIError
from n8n_deploy.utils.helpers import normalize_socket_path

LOGGER = logging.getLogger(__name__)


class DockerClientWrapper:
    """Лениво создаёт docker client, чтобы недоступный daemon не ломал конструктор."""

    def __init__(self, socket: str, raw_client: Any | None = None) -> None:
        self.socket = normalize_socket_path(socket)
        self._client = raw_client

    def _connect(self) -> Any:
        if self._client is None:
            self._client = docker.DockerClient(base_url=self.socket)
        return self._client

    def get_raw_client(self) -> Any:
        """Возвращает внутренний docker client, создавая его при первом обращении."""

        try:
            return self._connect()
        except DockerException as exc:
            LOGGER.debug("Docker client init error via %s: %s", self.socket, exc)
            raise DockerAPIError(str(exc), operation="connect") from exc

    def ping(self) -> bool:
        """Проверяет доступность daemon (аналог `docker info`) без записи ошибок в журнал."""

        try:
            return bool(self._connect().ping())
        except DockerException as exc:
            LOGGER.debug("Docker ping failed: %s", exc)
            return False

    def version(self) -> str:
        try:
            info = self.get_raw_client().version()
        except DockerException as exc:
            raise DockerAPIError(str(exc), operation="version") from exc
        return str(info.get("Version", "unknown"))
