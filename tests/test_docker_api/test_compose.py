"""Тесты команд ComposeProject."""

from __future__ import annotations

from pathlib import Path

import pytest

from n8n_deploy.docker_api.compose import ComposeProject
from n8n_deploy.exceptions import CommandError


def test_commands_run_in_project_dir(runner, tmp_path: Path) -> None:
    compose = ComposeProject(runner, tmp_path)
    compose.down()
    compose.pull()
    compose.up()

    assert runner.calls == [
        ["docker-compose", "down", "--remove-orphans"],
        ["docker-compose", "pull"],
        ["docker-compose", "up", "-d"],
    ]
    assert runner.cwds == [tmp_path] * 3


def test_plugin_command_is_supported(runner, tmp_path: Path) -> None:
    compose = ComposeProject(runner, tmp_path, ["docker", "compose"])
    compose.logs(tail=50)
    assert runner.calls == [["docker", "compose", "logs", "--tail=50"]]


def test_diagnostic_commands_do_not_raise(runner, tmp_path: Path) -> None:
    runner.responses[("docker-compose",)] = ("no configuration file provided", 1)
    compose = ComposeProject(runner, tmp_path)

    assert not compose.ps().ok
    assert not compose.version().ok
    with pytest.raises(CommandError):
        compose.up()
