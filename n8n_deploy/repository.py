"""Синхронизация git-репозитория с конфигурацией стека."""

from __future__ import annotations

import logging
from pathlib import Path

from n8n_deploy.commands.executor import CommandRunner
from n8n_deploy.utils.helpers import make_executable

LOGGER = logging.getLogger(__name__)


def clone_or_update(runner: CommandRunner, url: str, target: Path, branch: str) -> bool:
    """Клонирует репозиторий или, если каталог уже есть, подтягивает изменения.

    Возвращает True, если был выполнен clone.
    """

    if target.is_dir():
        LOGGER.warning("Directory %s already exists, updating...", target)
        runner.run(["git", "pull", "origin", branch], cwd=target, echo=True)
        return False
    LOGGER.info("Cloning repository %s into %s", url, target)
    runner.run(["git", "clone", url, str(target)], echo=True)
    return True


def current_revision(runner: CommandRunner, project_dir: Path, ref: str = "HEAD") -> str:
    return runner.run(["git", "rev-parse", ref], cwd=project_dir).output.strip()


def sync_repository(
    runner: CommandRunner,
    project_dir: Path,
    branch: str,
    entry_script: str,
) -> bool:
    """fetch, сравнение HEAD с origin/<branch> и fast-forward pull при расхождении.

    При совпадении ревизий изменяющих команд не выполняется. Возвращает True,
    если репозиторий был обновлён.
    """

    LOGGER.info("Checking for repository updates...")
    runner.run(["git", "fetch", "origin"], cwd=project_dir)
    local = current_revision(runner, project_dir)
    remote = current_revision(runner, project_dir, f"origin/{branch}")
    if local == remote:
        LOGGER.info("Repository is up to date (%s)", local[:12])
        return False

    LOGGER.info("Repository updates found, applying changes...")
    changes = runner.run(
        ["git", "log", "--oneline", "--decorate", f"{local}..{remote}"],
        cwd=project_dir,
    )
    for line in changes.lines():
        LOGGER.info("  %s", line)
    runner.run(["git", "pull", "--ff-only", "origin", branch], cwd=project_dir, echo=True)
    if not make_executable(project_dir / entry_script):
        LOGGER.warning("Entry script %s not found in %s", entry_script, project_dir)
    LOGGER.info("Repository updated successfully")
    return True
