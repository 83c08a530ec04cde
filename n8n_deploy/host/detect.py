"""Определение ОС по /etc/os-release и построение HostEnvironment."""

from __future__ import annotations

import logging
import os
import shlex
from pathlib import Path
from typing import Mapping, Optional, Tuple

from n8n_deploy.exceptions import UnsupportedOSError
from n8n_deploy.host.models import HostEnvironment, OSFamily
from n8n_deploy.utils.helpers import is_root
from n8n_deploy.utils.paths import OS_RELEASE_PATH

LOGGER = logging.getLogger(__name__)

_FAMILY_MARKERS: Tuple[Tuple[OSFamily, Tuple[str, ...]], ...] = (
    (OSFamily.DEBIAN, ("Ubuntu", "Debian")),
    (OSFamily.RHEL, ("CentOS", "Red Hat", "Amazon Linux")),
)


def classify_os(os_name: str) -> OSFamily:
    """Относит значение NAME из os-release к семейству ОС."""

    for family, markers in _FAMILY_MARKERS:
        if any(marker in os_name for marker in markers):
            return family
    return OSFamily.UNSUPPORTED


def read_os_release(path: Path = OS_RELEASE_PATH) -> Tuple[str, str]:
    """Возвращает (NAME, VERSION_ID) из файла os-release."""

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise UnsupportedOSError("", reason=f"cannot read {path}: {exc}") from exc

    fields = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw_value = line.partition("=")
        try:
            parts = shlex.split(raw_value)
        except ValueError:
            parts = [raw_value.strip("\"'")]
        fields[key.strip()] = parts[0] if parts else ""
    return fields.get("NAME", ""), fields.get("VERSION_ID", "")


def resolve_target_user(environ: Mapping[str, str]) -> Tuple[str, Path]:
    """Пользователь, от имени которого выполнен sudo, и его домашний каталог."""

    user = environ.get("SUDO_USER") or "root"
    home = Path("/root") if user == "root" else Path("/home") / user
    return user, home


def build_environment(
    os_release_path: Path = OS_RELEASE_PATH,
    environ: Optional[Mapping[str, str]] = None,
    euid: Optional[int] = None,
) -> HostEnvironment:
    """Собирает HostEnvironment; вызывается один раз в начале процедуры."""

    os_name, os_version = read_os_release(os_release_path)
    user, home = resolve_target_user(os.environ if environ is None else environ)
    environment = HostEnvironment(
        os_name=os_name,
        os_version=os_version,
        os_family=classify_os(os_name),
        user=user,
        home=home,
        is_root=is_root(euid),
    )
    LOGGER.info("Detected system: %s %s (%s)", os_name, os_version, environment.os_family.value)
    if not environment.is_supported:
        LOGGER.warning("Operating system %s is not supported", os_name or "unknown")
    return environment
