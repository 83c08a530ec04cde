"""Запуск внешних команд (apt/yum, systemctl, git, docker compose)."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from n8n_deploy.exceptions import CommandError

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class CommandResult:
    """Результат выполнения команды."""

    args: List[str]
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def lines(self) -> List[str]:
        return [line for line in self.output.splitlines() if line.strip()]


class CommandRunner:
    """Синхронно выполняет команды без shell и журналирует их вывод."""

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        check: bool = True,
        echo: bool = False,
    ) -> CommandResult:
        """Выполняет команду; при check=True ненулевой код превращается в CommandError.

        echo=True выводит строки результата на уровне INFO, иначе DEBUG.
        """

        command = [str(part) for part in args]
        LOGGER.debug("> %s", " ".join(command))
        try:
            completed = subprocess.run(  # noqa: PLW1510 - код возврата проверяется ниже
                command,
                cwd=str(cwd) if cwd else None,
                check=False,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except FileNotFoundError as exc:
            if check:
                raise CommandError(command, 127, str(exc)) from exc
            return CommandResult(args=command, returncode=127, output=str(exc))

        result = CommandResult(
            args=command,
            returncode=completed.returncode,
            output=completed.stdout or "",
        )
        level = logging.INFO if echo else logging.DEBUG
        for line in result.lines():
            LOGGER.log(level, "  %s", line)
        if check and not result.ok:
            raise CommandError(command, result.returncode, result.output)
        return result

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)
