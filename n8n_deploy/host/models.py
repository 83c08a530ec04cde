"""Неизменяемое описание хоста, вычисляемое один раз при старте процедуры."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class OSFamily(str, Enum):
    """Семейства ОС, для которых есть рецепт установки."""

    DEBIAN = "debian"
    RHEL = "rhel"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class HostEnvironment:
    """Параметры хоста, передаваемые каждому шагу процедуры."""

    os_name: str
    os_version: str
    os_family: OSFamily
    user: str  # владелец проекта: SUDO_USER или root
    home: Path
    is_root: bool

    @property
    def is_supported(self) -> bool:
        return self.os_family is not OSFamily.UNSUPPORTED

    def project_path(self, directory: str) -> Path:
        return self.home / directory
