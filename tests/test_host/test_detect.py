"""Тесты определения ОС и целевого пользователя."""

from __future__ import annotations

from pathlib import Path

import pytest

from n8n_deploy.exceptions import UnsupportedOSError
from n8n_deploy.host.detect import (
    build_environment,
    classify_os,
    read_os_release,
    resolve_target_user,
)
from n8n_deploy.host.models import OSFamily


@pytest.mark.parametrize(
    ("os_name", "family"),
    [
        ("Ubuntu", OSFamily.DEBIAN),
        ("Debian GNU/Linux", OSFamily.DEBIAN),
        ("CentOS Linux", OSFamily.RHEL),
        ("Red Hat Enterprise Linux", OSFamily.RHEL),
        ("Amazon Linux", OSFamily.RHEL),
        ("Arch Linux", OSFamily.UNSUPPORTED),
        ("", OSFamily.UNSUPPORTED),
    ],
)
def test_classify_os(os_name: str, family: OSFamily) -> None:
    assert classify_os(os_name) is family


def test_read_os_release_parses_quoted_values(tmp_path: Path) -> None:
    path = tmp_path / "os-release"
    path.write_text(
        '# comment\nNAME="Ubuntu"\nVERSION_ID="22.04"\nID=ubuntu\nPRETTY_NAME="Ubuntu 22.04.4 LTS"\n',
        encoding="utf-8",
    )
    assert read_os_release(path) == ("Ubuntu", "22.04")


def test_read_os_release_missing_file(tmp_path: Path) -> None:
    with pytest.raises(UnsupportedOSError):
        read_os_release(tmp_path / "missing")


def test_resolve_target_user_prefers_sudo_user() -> None:
    assert resolve_target_user({"SUDO_USER": "deploy"}) == ("deploy", Path("/home/deploy"))
    assert resolve_target_user({}) == ("root", Path("/root"))


def test_build_environment(tmp_path: Path) -> None:
    path = tmp_path / "os-release"
    path.write_text('NAME="Amazon Linux"\nVERSION_ID="2"\n', encoding="utf-8")

    environment = build_environment(path, environ={"SUDO_USER": "ec2-user"}, euid=0)

    assert environment.os_family is OSFamily.RHEL
    assert environment.os_version == "2"
    assert environment.is_root and environment.is_supported
    assert environment.project_path("n8n-rmp") == Path("/home/ec2-user/n8n-rmp")


def test_build_environment_unsupported_is_not_an_error(tmp_path: Path) -> None:
    path = tmp_path / "os-release"
    path.write_text('NAME="Alpine Linux"\nVERSION_ID=3.19.1\n', encoding="utf-8")

    environment = build_environment(path, environ={}, euid=1000)

    assert environment.os_family is OSFamily.UNSUPPORTED
    assert not environment.is_supported
    assert not environment.is_root
