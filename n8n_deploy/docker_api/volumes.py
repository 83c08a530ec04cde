"""Функции для работы с томами Docker."""

from __future__ import annotations

from typing import Dict, Iterable, List

from docker.errors import DockerException

from n8n_deploy.docker_api.client import DockerClientWrapper
from n8n_deploy.docker_api.exceptions import DockerAPIError


def list_volumes(client: DockerClientWrapper) -> List[Dict[str, str]]:
    """Возвращает тома с драйвером и точкой монтирования."""

    raw = client.get_raw_client()
    try:
        items = raw.volumes.list()
    except DockerException as exc:
        raise DockerAPIError(str(exc), operation="list volumes") from exc
    volumes = []
    for volume in items:
        attrs = getattr(volume, "attrs", {}) or {}
        volumes.append(
            {
                "name": volume.name,
                "driver": attrs.get("Driver") or "local",
                "mountpoint": attrs.get("Mountpoint") or "",
            }
        )
    return volumes


def matching_volumes(client: DockerClientWrapper, fragments: Iterable[str]) -> List[Dict[str, str]]:
    """Тома, имя которых содержит один из фрагментов (compose добавляет префикс проекта)."""

    wanted = list(fragments)
    return [
        volume
        for volume in list_volumes(client)
        if any(fragment in volume["name"] for fragment in wanted)
    ]


def volume_exists(client: DockerClientWrapper, fragment: str) -> bool:
    return bool(matching_volumes(client, [fragment]))
