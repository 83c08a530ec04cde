"""Общие фейки: запуск команд, docker SDK client, HTTP-проверки и реестр настроек."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import pytest
from docker.errors import APIError, ImageNotFound, NotFound

from n8n_deploy.commands.executor import CommandResult
from n8n_deploy.docker_api.client import DockerClientWrapper
from n8n_deploy.exceptions import CommandError
from n8n_deploy.settings.registry import SettingsRegistry

Response = Union[Tuple[str, int], Callable[[List[str]], Tuple[str, int]]]


class FakeRunner:
    """Записывает команды и отвечает заранее заданным выводом по префиксу."""

    def __init__(self, responses: Optional[Dict[Tuple[str, ...], Response]] = None) -> None:
        self.calls: List[List[str]] = []
        self.cwds: List[Optional[Path]] = []
        self.responses: Dict[Tuple[str, ...], Response] = dict(responses or {})

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        check: bool = True,
        echo: bool = False,
    ) -> CommandResult:
        command = [str(part) for part in args]
        self.calls.append(command)
        self.cwds.append(cwd)
        output, code = self._respond(command)
        if check and code != 0:
            raise CommandError(command, code, output)
        return CommandResult(args=command, returncode=code, output=output)

    def which(self, name: str) -> Optional[str]:
        return f"/usr/bin/{name}"

    def invoked(self, *prefix: str) -> bool:
        return any(tuple(call[: len(prefix)]) == prefix for call in self.calls)

    def index_of(self, *prefix: str) -> int:
        for index, call in enumerate(self.calls):
            if tuple(call[: len(prefix)]) == prefix:
                return index
        return -1

    def _respond(self, command: List[str]) -> Tuple[str, int]:
        for prefix in sorted(self.responses, key=len, reverse=True):
            if tuple(command[: len(prefix)]) == prefix:
                response = self.responses[prefix]
                return response(command) if callable(response) else response
        return "", 0


class FakeContainer:
    def __init__(self, name: str, status: str) -> None:
        self.name = name
        self.status = status

    def logs(self, tail: int = 20) -> bytes:
        return f"{self.name} log line".encode()


class FakeContainers:
    """containers.list(): все контейнеры становятся running начиная с попытки running_after."""

    def __init__(self, names: Sequence[str], running_after: Optional[int] = 1) -> None:
        self.names = list(names)
        self.running_after = running_after
        self.list_calls = 0
        self.pruned = 0
        self.run_calls: List[str] = []
        self.run_error: Optional[Exception] = None

    def list(self, all: bool = True) -> List[FakeContainer]:
        self.list_calls += 1
        running = self.running_after is not None and self.list_calls >= self.running_after
        status = "running" if running else "created"
        return [FakeContainer(name, status) for name in self.names]

    def get(self, name: str) -> FakeContainer:
        if name not in self.names:
            raise NotFound(f"No such container: {name}")
        return FakeContainer(name, "running")

    def prune(self) -> Dict[str, Any]:
        self.pruned += 1
        return {"ContainersDeleted": ["old"]}

    def run(self, image: str, remove: bool = False) -> bytes:
        self.run_calls.append(image)
        if self.run_error is not None:
            raise self.run_error
        return b"Hello from Docker!"


class FakeImage:
    def __init__(self, identifier: str) -> None:
        self.id = f"sha256:{identifier}"
        self.short_id = f"sha256:{identifier[:10]}"


class FakeImages:
    """images.get/pull: после pull локальный образ получает идентификатор pulled_id."""

    def __init__(self, local_id: Optional[str] = "aaaaaaaaaaaa", pulled_id: str = "aaaaaaaaaaaa") -> None:
        self.local_id = local_id
        self.pulled_id = pulled_id
        self.pulls: List[Tuple[str, str]] = []
        self.pruned = 0

    def get(self, reference: str) -> FakeImage:
        if self.local_id is None:
            raise ImageNotFound(f"No such image: {reference}")
        return FakeImage(self.local_id)

    def pull(self, repository: str, tag: Optional[str] = None) -> FakeImage:
        self.pulls.append((repository, tag or ""))
        self.local_id = self.pulled_id
        return FakeImage(self.pulled_id)

    def prune(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.pruned += 1
        return {"ImagesDeleted": None}


class FakeVolume:
    def __init__(self, name: str) -> None:
        self.name = name
        self.attrs = {"Driver": "local", "Mountpoint": f"/var/lib/docker/volumes/{name}/_data"}


class FakeVolumes:
    """volumes.list(): после fail_after успешных вызовов поднимает APIError."""

    def __init__(self, names: Sequence[str]) -> None:
        self.names = list(names)
        self.list_calls = 0
        self.fail_after: Optional[int] = None

    def list(self) -> List[FakeVolume]:
        self.list_calls += 1
        if self.fail_after is not None and self.list_calls > self.fail_after:
            raise APIError("volume list failed")
        return [FakeVolume(name) for name in self.names]


class FakeRawClient:
    def __init__(
        self,
        *,
        container_names: Sequence[str] = ("nginx_proxy_rmp", "letsencrypt_rmp", "n8n_rockmypost"),
        running_after: Optional[int] = 1,
        volume_names: Sequence[str] = ("n8n-rmp_rockmypost_n8n_data", "n8n-rmp_nginx_certs"),
        ping_results: Sequence[bool] = (True,),
    ) -> None:
        self.containers = FakeContainers(container_names, running_after)
        self.images = FakeImages()
        self.volumes = FakeVolumes(volume_names)
        self.ping_results = list(ping_results)
        self.ping_calls = 0

    def ping(self) -> bool:
        index = min(self.ping_calls, len(self.ping_results) - 1)
        self.ping_calls += 1
        return self.ping_results[index]

    def version(self) -> Dict[str, str]:
        return {"Version": "27.0.1"}


class FakeProbe:
    """HTTP-проверки: reachable по префиксу URL, по умолчанию default."""

    def __init__(self, reachable: Optional[Dict[str, bool]] = None, default: bool = True) -> None:
        self.rules = dict(reachable or {})
        self.default = default
        self.calls: List[str] = []
        self.downloads: List[Tuple[str, Path]] = []
        self.json_payload: Any = {"tag_name": "v2.29.1"}
        self.closed = False

    def reachable(self, url: str, timeout: float) -> bool:
        self.calls.append(url)
        for prefix, result in self.rules.items():
            if url.startswith(prefix):
                return result
        return self.default

    def get_json(self, url: str, timeout: float) -> Any:
        return self.json_payload

    def download(self, url: str, destination: Path, timeout: float = 60) -> None:
        self.downloads.append((url, destination))
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(b"binary")

    def close(self) -> None:
        self.closed = True


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def settings(tmp_path: Path) -> SettingsRegistry:
    SettingsRegistry._instance = None  # type: ignore[attr-defined]
    registry = SettingsRegistry(tmp_path / "config.json")
    registry.reset_to_defaults()
    yield registry
    SettingsRegistry._instance = None  # type: ignore[attr-defined]


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def raw_client() -> FakeRawClient:
    return FakeRawClient()


@pytest.fixture
def docker_client(raw_client: FakeRawClient) -> DockerClientWrapper:
    return DockerClientWrapper("/var/run/docker.sock", raw_client=raw_client)


@pytest.fixture
def probe() -> FakeProbe:
    return FakeProbe()


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_docker() -> Callable[..., DockerClientWrapper]:
    """Фабрика DockerClientWrapper поверх FakeRawClient с заданными параметрами."""

    def factory(**kwargs: Any) -> DockerClientWrapper:
        return DockerClientWrapper("/var/run/docker.sock", raw_client=FakeRawClient(**kwargs))

    return factory
