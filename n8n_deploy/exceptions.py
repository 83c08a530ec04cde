"""Исключения процедур развёртывания: все они фатальны и завершают запуск с кодом 1."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

LOGGER = logging.getLogger(__name__)


class DeployError(Exception):
    """Базовая фатальная ошибка развёртывания с контекстом для журнала."""

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        """Сохраняет сообщение и контекст, логируя ошибку."""

        self.message = message
        self.context = context or {}
        super().__init__(message)
        LOGGER.error("%s | context=%s", message, self.context)


class PrivilegeError(DeployError):
    """Процедура запущена без прав root."""

    def __init__(self, hint: str) -> None:
        self.hint = hint
        super().__init__(
            "This command must be run as root or with sudo",
            context={"hint": hint},
        )


class UnsupportedOSError(DeployError):
    """ОС не удалось определить или она не входит в поддерживаемые семейства."""

    def __init__(self, os_name: str, reason: str = "unsupported operating system") -> None:
        self.os_name = os_name
        super().__init__(
            f"Unsupported operating system: {os_name or 'unknown'} ({reason})",
            context={"os_name": os_name, "reason": reason},
        )


class MissingConfigError(DeployError):
    """Отсутствует файл конфигурации развёртывания (.env)."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"{path.name} file not found in {path.parent}",
            context={"path": str(path)},
        )


class DockerUnavailableError(DeployError):
    """Docker daemon недоступен даже после попытки запуска."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"Failed to reach the Docker daemon: {reason}",
            context={"reason": reason},
        )


class NetworkUnreachableError(DeployError):
    """Проверка сетевой доступности не прошла."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(
            f"No internet connectivity ({url} is unreachable)",
            context={"url": url},
        )


class ReadinessTimeoutError(DeployError):
    """Фатальное ожидание готовности исчерпало все попытки."""

    def __init__(self, description: str, attempts: int) -> None:
        self.description = description
        self.attempts = attempts
        super().__init__(
            f"{description} did not succeed after {attempts} attempts",
            context={"description": description, "attempts": attempts},
        )


class SmokeTestError(DeployError):
    """Контрольный контейнер hello-world не запустился."""

    def __init__(self, image: str, reason: str) -> None:
        super().__init__(
            f"Docker smoke test with {image} failed: {reason}",
            context={"image": image, "reason": reason},
        )


class CommandError(DeployError):
    """Внешняя команда завершилась с ненулевым кодом."""

    def __init__(self, args: Sequence[str], returncode: int, output: str = "") -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"Command failed ({returncode}): {' '.join(self.args_list)}",
            context={"returncode": returncode, "output": output[-2000:]},
        )
