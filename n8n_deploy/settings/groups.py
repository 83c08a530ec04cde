"""Группы настроек развёртывания с валидацией значений."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

from n8n_deploy.settings.exceptions import SettingsNotFoundError, SettingsValidationError
from n8n_deploy.settings.validators import (
    CompositeValidator,
    EnumValidator,
    ItemsValidator,
    RangeValidator,
    RegexValidator,
    TypeValidator,
    Validator,
)

URL_PATTERN = r"^https?://\S+$"
NAME_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.\-]*$"
ENV_FILE_PATTERN = r"^\.?[A-Za-z0-9][A-Za-z0-9_.\-]*$"
IMAGE_PATTERN = r"^[a-z0-9][a-z0-9_.\-/]*(:[A-Za-z0-9_.\-]+)?$"


class SettingsGroup(ABC):
    """Абстрактная база для конкретных групп настроек."""

    group_name: str = ""

    def __init__(self) -> None:
        self._defaults: Dict[str, Any] = {}
        self._validators: Dict[str, Validator] = {}
        self._values: Dict[str, Any] = {}
        self._initialize_defaults()
        self._setup_validators()
        self.reset_to_defaults()

    @abstractmethod
    def _initialize_defaults(self) -> None:
        """Задаёт значения по умолчанию для группы."""

    @abstractmethod
    def _setup_validators(self) -> None:
        """Привязывает валидаторы к ключам группы."""

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._defaults.keys())

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._defaults:
            raise SettingsNotFoundError(self.group_name, key)
        return self._values.get(key, default)

    def validate(self, key: str, value: Any) -> Tuple[bool, str]:
        validator = self._validators.get(key)
        if not validator:
            return True, ""
        return validator.validate(value)

    def set(self, key: str, value: Any) -> None:
        """Сохраняет значение, выбрасывая ошибку при невалидных данных."""

        if key not in self._defaults:
            raise SettingsNotFoundError(self.group_name, key)
        is_valid, error = self.validate(key, value)
        if not is_valid:
            raise SettingsValidationError(
                key=f"{self.group_name}.{key}",
                value=value,
                reason=error,
            )
        self._values[key] = value

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def from_dict(self, data: Dict[str, Any]) -> None:
        """Заполняет значениями из словаря; неизвестные ключи игнорируются."""

        for key, value in data.items():
            if key in self._defaults:
                self.set(key, value)

    def reset_to_defaults(self) -> None:
        self._values = {
            key: list(value) if isinstance(value, list) else value
            for key, value in self._defaults.items()
        }


class LoggingSettings(SettingsGroup):
    """Настройки логирования."""

    group_name = "logging"

    def _initialize_defaults(self) -> None:
        self._defaults = {
            "enabled": True,
            "level": "INFO",
            "max_file_size_mb": 10,
            "max_archived_files": 5,
        }

    def _setup_validators(self) -> None:
        self._validators = {
            "enabled": TypeValidator(bool),
            "level": EnumValidator(["DEBUG", "INFO", "WARNING", "ERROR"]),
            "max_file_size_mb": RangeValidator(1, 1000),
            "max_archived_files": RangeValidator(1, 50),
        }


class RepositorySettings(SettingsGroup):
    """Git-репозиторий с docker-compose.yml и start-скриптом."""

    group_name = "repository"

    def _initialize_defaults(self) -> None:
        self._defaults = {
            "url": "https://github.com/rockmypost/n8n-rmp.git",
            "directory": "n8n-rmp",
            "branch": "main",
            "entry_script": "start.sh",
        }

    def _setup_validators(self) -> None:
        name = CompositeValidator([TypeValidator(str), RegexValidator(NAME_PATTERN)])
        self._validators = {
            "url": CompositeValidator([TypeValidator(str), RegexValidator(r"^\S+$")]),
            "directory": name,
            "branch": CompositeValidator([TypeValidator(str), RegexValidator(r"^[\w./\-]+$")]),
            "entry_script": name,
        }


class StackSettings(SettingsGroup):
    """Состав docker compose стека (proxy, letsencrypt, n8n)."""

    group_name = "stack"

    def _initialize_defaults(self) -> None:
        self._defaults = {
            "image": "n8nio/n8n:latest",
            "containers": ["nginx_proxy_rmp", "letsencrypt_rmp", "n8n_rockmypost"],
            "volumes": ["rockmypost_n8n_data", "nginx_certs"],
            "data_volume": "rockmypost_n8n_data",
            "ssl_container": "letsencrypt_rmp",
            "compose_command": ["docker-compose"],
            "docker_socket": "unix:///var/run/docker.sock",
            "env_file": ".env",
            "smoke_test_image": "hello-world",
            "logs_tail": 20,
        }

    def _setup_validators(self) -> None:
        name = CompositeValidator([TypeValidator(str), RegexValidator(NAME_PATTERN)])
        image = CompositeValidator([TypeValidator(str), RegexValidator(IMAGE_PATTERN)])
        self._validators = {
            "image": image,
            "containers": ItemsValidator(name),
            "volumes": ItemsValidator(name, allow_empty=True),
            "data_volume": name,
            "ssl_container": name,
            "compose_command": ItemsValidator(TypeValidator(str)),
            "docker_socket": TypeValidator(str),
            "env_file": CompositeValidator([TypeValidator(str), RegexValidator(ENV_FILE_PATTERN)]),
            "smoke_test_image": image,
            "logs_tail": RangeValidator(1, 10000),
        }


class NetworkSettings(SettingsGroup):
    """Адреса проверок доступности и параметры установки docker-compose."""

    group_name = "network"

    def _initialize_defaults(self) -> None:
        self._defaults = {
            "connectivity_url": "https://api.github.com",
            "connectivity_timeout_sec": 10,
            "healthcheck_url": "http://localhost:5678/healthz",
            "health_timeout_sec": 5,
            "ssl_timeout_sec": 15,
            "firewall_ports": [22, 80, 443],
            "compose_release_api": "https://api.github.com/repos/docker/compose/releases/latest",
            "compose_download_base": "https://github.com/docker/compose/releases/download",
            "compose_fallback_version": "v2.20.0",
            "compose_binary_path": "/usr/local/bin/docker-compose",
        }

    def _setup_validators(self) -> None:
        url = CompositeValidator([TypeValidator(str), RegexValidator(URL_PATTERN)])
        self._validators = {
            "connectivity_url": url,
            "connectivity_timeout_sec": RangeValidator(1, 300),
            "healthcheck_url": url,
            "health_timeout_sec": RangeValidator(1, 300),
            "ssl_timeout_sec": RangeValidator(1, 300),
            "firewall_ports": ItemsValidator(
                CompositeValidator([TypeValidator(int), RangeValidator(1, 65535)])
            ),
            "compose_release_api": url,
            "compose_download_base": url,
            "compose_fallback_version": CompositeValidator(
                [TypeValidator(str), RegexValidator(r"^v\d+\.\d+\.\d+$")]
            ),
            "compose_binary_path": CompositeValidator(
                [TypeValidator(str), RegexValidator(r"^/\S+$")]
            ),
        }


class PollingSettings(SettingsGroup):
    """Число попыток, интервалы и начальные задержки ожидания готовности."""

    group_name = "polling"

    def _initialize_defaults(self) -> None:
        self._defaults = {
            "containers_attempts": 10,
            "containers_interval_sec": 10,
            "health_initial_delay_sec": 20,
            "health_attempts": 8,
            "health_interval_sec": 10,
            "ssl_initial_delay_sec": 30,
            "ssl_attempts": 6,
            "ssl_interval_sec": 30,
            "docker_start_wait_sec": 3,
        }

    def _setup_validators(self) -> None:
        attempts = CompositeValidator([TypeValidator(int), RangeValidator(1, 100)])
        seconds = RangeValidator(0, 600)
        self._validators = {
            "containers_attempts": attempts,
            "containers_interval_sec": seconds,
            "health_initial_delay_sec": seconds,
            "health_attempts": attempts,
            "health_interval_sec": seconds,
            "ssl_initial_delay_sec": seconds,
            "ssl_attempts": attempts,
            "ssl_interval_sec": seconds,
            "docker_start_wait_sec": seconds,
        }
