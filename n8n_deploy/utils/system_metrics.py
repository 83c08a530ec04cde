"""Снимок ресурсов хоста при помощи psutil для итоговых сводок."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import psutil


@dataclass(slots=True)
class SystemMetrics:
    """Использование RAM, CPU и диска в человекочитаемом виде."""

    ram: str
    cpu: str
    disk: str


def read_system_metrics(disk_path: Path = Path("/")) -> SystemMetrics:
    """Возвращает сведения об использовании RAM, CPU и диска под disk_path."""

    memory = psutil.virtual_memory()
    cpu_percent = psutil.cpu_percent(interval=None)
    disk = psutil.disk_usage(str(disk_path))
    return SystemMetrics(
        ram=f"{memory.percent:.1f}% ({format_bytes(memory.used)}/{format_bytes(memory.total)})",
        cpu=f"{cpu_percent:.1f}%",
        disk=f"{disk.percent:.1f}% ({format_bytes(disk.free)} free)",
    )


def format_bytes(value: float) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(value)
    index = 0
    while size >= 1024 and index < len(units) - 1:
        size /= 1024.0
        index += 1
    return f"{size:.1f} {units[index]}"
