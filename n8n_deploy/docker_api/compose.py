"""Управление стеком через CLI docker compose (в docker SDK compose отсутствует)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

from n8n_deploy.commands.executor import CommandResult, CommandRunner

LOGGER = logging.getLogger(__name__)


class ComposeProject:
    """Команды compose, выполняемые в каталоге проекта с docker-compose.yml."""

    def __init__(
        self,
        runner: CommandRunner,
        project_dir: Path,
        command: Sequence[str] = ("docker-compose",),
    ) -> None:
        self._runner = runner
        self.project_dir = project_dir
        self.command: List[str] = list(command)

    def down(self, *, remove_orphans: bool = True) -> CommandResult:
        args = ["down"]
        if remove_orphans:
            args.append("--remove-orphans")
        return self._run(args)

    def pull(self) -> CommandResult:
        return self._run(["pull"], echo=True)

    def up(self, *, detached: bool = True) -> CommandResult:
        args = ["up"]
        if detached:
            args.append("-d")
        return self._run(args, echo=True)

    def ps(self) -> CommandResult:
        return self._run(["ps"], check=False)

    def logs(self, *, tail: int = 20) -> CommandResult:
        return self._run(["logs", f"--tail={tail}"], check=False)

    def version(self) -> CommandResult:
        return self._run(["version"], check=False)

    def _run(self, args: List[str], *, check: bool = True, echo: bool = False) -> CommandResult:
        LOGGER.debug("compose %s in %s", " ".join(args), self.project_dir)
        return self._runner.run([*self.command, *args], cwd=self.project_dir, check=check, echo=echo)
