"""Функции для работы с контейнерами стека через Docker client."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from docker.errors import DockerException, NotFound

from n8n_deploy.docker_api.client import DockerClientWrapper
from n8n_deploy.docker_api.exceptions import DockerAPIError

_RUNNING_MARKERS = ("up", "running")


def container_statuses(client: DockerClientWrapper, names: Iterable[str]) -> Dict[str, Optional[str]]:
    """Возвращает статус каждого контейнера по имени (None, если контейнера нет)."""

    wanted = list(names)
    raw = client.get_raw_client()
    try:
        found = {container.name: container for container in raw.containers.list(all=True)}
    except DockerException as exc:
        raise DockerAPIError(str(exc), operation="list containers") from exc
    statuses: Dict[str, Optional[str]] = {}
    for name in wanted:
        container = found.get(name)
        statuses[name] = (getattr(container, "status", "") or "") if container else None
    return statuses


def is_running_status(status: Optional[str]) -> bool:
    return bool(status) and status.lower().startswith(_RUNNING_MARKERS)  # type: ignore[union-attr]


def all_running(client: DockerClientWrapper, names: Iterable[str]) -> bool:
    """True, только если каждый из контейнеров names запущен."""

    statuses = container_statuses(client, names)
    return bool(statuses) and all(is_running_status(status) for status in statuses.values())


def prune_containers(client: DockerClientWrapper) -> int:
    """Удаляет остановленные контейнеры (docker container prune -f)."""

    raw = client.get_raw_client()
    try:
        result = raw.containers.prune()
    except DockerException as exc:
        raise DockerAPIError(str(exc), operation="prune containers") from exc
    return len((result or {}).get("ContainersDeleted") or [])


def run_smoke_test(client: DockerClientWrapper, image: str = "hello-world") -> str:
    """Запускает одноразовый контейнер и возвращает его вывод."""

    raw = client.get_raw_client()
    try:
        output = raw.containers.run(image, remove=True)
    except DockerException as exc:
        raise DockerAPIError(str(exc), operation=f"run {image}") from exc
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="ignore")
    return str(output or "")


def fetch_logs(client: DockerClientWrapper, name: str, *, tail: int = 20) -> str:
    """Возвращает хвост логов контейнера."""

    raw = client.get_raw_client()
    try:
        data = raw.containers.get(name).logs(tail=tail)
    except NotFound:
        return ""
    except DockerException as exc:
        raise DockerAPIError(str(exc), operation=f"logs {name}") from exc
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="ignore")
    return str(data)
