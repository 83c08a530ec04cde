"""Различные вспомогательные функции."""

from __future__ import annotations

import os
import stat
from pathlib import Path

_SOCKET_SCHEMES = ("unix://", "tcp://", "npipe://", "http://", "https://", "ssh://")


def normalize_socket_path(raw_value: str) -> str:
    """Возвращает путь сокета Docker с корректным префиксом unix://."""

    value = raw_value.strip()
    if not value:
        return value
    if value.lower().startswith(_SOCKET_SCHEMES):
        return value
    if value.startswith("/"):
        return f"unix://{value}"
    return value


def make_executable(path: Path) -> bool:
    """Аналог chmod +x; возвращает False, если файла нет."""

    if not path.is_file():
        return False
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return True


def is_root(euid: int | None = None) -> bool:
    return (os.geteuid() if euid is None else euid) == 0
