"""Функции для работы с образами Docker."""

from __future__ import annotations

from typing import Optional

from docker.errors import DockerException, ImageNotFound

from n8n_deploy.docker_api.client import DockerClientWrapper
from n8n_deploy.docker_api.exceptions import DockerAPIError


def get_image_id(client: DockerClientWrapper, reference: str) -> Optional[str]:
    """Возвращает идентификатор локального образа или None, если его нет."""

    raw = client.get_raw_client()
    try:
        image = raw.images.get(reference)
    except ImageNotFound:
        return None
    except DockerException as exc:
        raise DockerAPIError(str(exc), operation=f"inspect {reference}") from exc
    return getattr(image, "short_id", None) or image.id


def pull_image(client: DockerClientWrapper, reference: str) -> Optional[str]:
    """Скачивает образ и возвращает идентификатор полученной версии."""

    repository, _, tag = reference.rpartition(":")
    if not repository or "/" in tag:
        repository, tag = reference, "latest"
    raw = client.get_raw_client()
    try:
        image = raw.images.pull(repository, tag=tag)
    except DockerException as exc:
        raise DockerAPIError(str(exc), operation=f"pull {reference}") from exc
    return getattr(image, "short_id", None) or getattr(image, "id", None)


def prune_images(client: DockerClientWrapper) -> int:
    """Удаляет dangling-образы (docker image prune -f)."""

    raw = client.get_raw_client()
    try:
        result = raw.images.prune(filters={"dangling": True})
    except DockerException as exc:
        raise DockerAPIError(str(exc), operation="prune images") from exc
    return len((result or {}).get("ImagesDeleted") or [])
