"""Первичная подготовка хоста: Docker, firewall, репозиторий и шаблон .env."""

from __future__ import annotations

import logging
import platform
import tempfile
from dataclasses import dataclass
from pathlib import Path

import httpx

from n8n_deploy.commands.executor import CommandRunner
from n8n_deploy.docker_api.client import DockerClientWrapper
from n8n_deploy.docker_api.compose import ComposeProject
from n8n_deploy.docker_api.containers import run_smoke_test
from n8n_deploy.docker_api.exceptions import DockerAPIError
from n8n_deploy.envfile import write_blank_env
from n8n_deploy.exceptions import CommandError, PrivilegeError, SmokeTestError
from n8n_deploy.host.models import HostEnvironment
from n8n_deploy.probes import HttpProbe, latest_compose_version
from n8n_deploy.provisioner.recipes import InstallRecipe, recipe_for
from n8n_deploy.repository import clone_or_update
from n8n_deploy.settings.registry import SettingsRegistry
from n8n_deploy.utils.helpers import make_executable
from n8n_deploy.utils.system_metrics import read_system_metrics

LOGGER = logging.getLogger(__name__)

DOCKER_KEY_URL = "https://download.docker.com/linux/{distro}/gpg"
DOCKER_APT_URL = "https://download.docker.com/linux/{distro}"
KEYRING_PATH = Path("/usr/share/keyrings/docker-archive-keyring.gpg")
APT_SOURCE_PATH = Path("/etc/apt/sources.list.d/docker.list")


@dataclass(slots=True)
class ProvisionReport:
    """Итог подготовки хоста."""

    project_dir: Path
    cloned: bool
    env_created: bool
    compose_version: str


class Provisioner:
    """Выполняет шаги подготовки по порядку; любая ошибка прерывает процедуру."""

    def __init__(
        self,
        settings: SettingsRegistry,
        environment: HostEnvironment,
        *,
        runner: CommandRunner,
        docker: DockerClientWrapper,
        probe: HttpProbe,
        keyring_path: Path = KEYRING_PATH,
        apt_source_path: Path = APT_SOURCE_PATH,
    ) -> None:
        self._settings = settings
        self._env = environment
        self._runner = runner
        self._docker = docker
        self._probe = probe
        self._keyring_path = keyring_path
        self._apt_source_path = apt_source_path

    def run(self) -> ProvisionReport:
        """Подготавливает хост и возвращает сводку."""

        self._check_preconditions()
        LOGGER.info("Running as root, target user: %s", self._env.user)
        ports = self._settings.get_value("network", "firewall_ports")
        recipe = recipe_for(self._env.os_family, ports, self._env.os_name)

        self.install_dependencies(recipe)
        compose_version = self.install_docker_compose()
        self.configure_docker()
        project_dir, cloned, env_created = self.setup_project()
        self.verify_installation(project_dir)

        report = ProvisionReport(
            project_dir=project_dir,
            cloned=cloned,
            env_created=env_created,
            compose_version=compose_version,
        )
        self._log_summary(report)
        return report

    def _check_preconditions(self) -> None:
        if not self._env.is_root:
            raise PrivilegeError("Usage: sudo n8n-deploy-setup")

    # ----------------------------------------------------------------- steps --
    def install_dependencies(self, recipe: InstallRecipe) -> None:
        LOGGER.info("Installing dependencies for %s...", self._env.os_name)
        for step in recipe.prepare:
            self._run_step(step.description, step.args, step.ignore_errors)
        if recipe.needs_apt_repository:
            self._add_docker_apt_repository()
        LOGGER.info("Installing Docker...")
        for step in recipe.docker:
            self._run_step(step.description, step.args, step.ignore_errors)
        LOGGER.info("Configuring firewall...")
        for step in recipe.firewall:
            self._run_step(step.description, step.args, step.ignore_errors)

    def install_docker_compose(self) -> str:
        """Ставит standalone docker-compose последней версии (или fallback)."""

        LOGGER.info("Installing Docker Compose standalone...")
        version = latest_compose_version(
            self._probe,
            self._settings.get_value("network", "compose_release_api"),
            self._settings.get_value("network", "compose_fallback_version"),
        )
        base = self._settings.get_value("network", "compose_download_base").rstrip("/")
        url = f"{base}/{version}/docker-compose-{platform.system()}-{platform.machine()}"
        target = Path(self._settings.get_value("network", "compose_binary_path"))
        try:
            self._probe.download(url, target)
        except httpx.HTTPError as exc:
            raise CommandError(["download", url], 1, str(exc)) from exc
        make_executable(target)
        LOGGER.info("Docker Compose %s installed to %s", version, target)
        return version

    def configure_docker(self) -> None:
        LOGGER.info("Configuring Docker service...")
        self._runner.run(["systemctl", "start", "docker"])
        self._runner.run(["systemctl", "enable", "docker"])
        if self._env.user != "root":
            self._runner.run(["usermod", "-aG", "docker", self._env.user])
            LOGGER.info("User %s added to docker group", self._env.user)

    def setup_project(self) -> tuple[Path, bool, bool]:
        """Клонирует/обновляет репозиторий, создаёт .env и делает start-скрипт исполняемым."""

        LOGGER.info("Setting up N8N project...")
        repository = self._settings.get_group("repository")
        project_dir = self._env.project_path(repository.get("directory"))
        cloned = clone_or_update(
            self._runner,
            repository.get("url"),
            project_dir,
            repository.get("branch"),
        )
        owner = f"{self._env.user}:{self._env.user}"
        self._runner.run(["chown", "-R", owner, str(project_dir)])

        env_path = project_dir / self._settings.get_value("stack", "env_file")
        env_created = write_blank_env(env_path)
        if env_created:
            self._runner.run(["chown", owner, str(env_path)])
            LOGGER.warning(
                "IMPORTANT: Edit %s with your actual values before running n8n-deploy-start",
                env_path,
            )

        entry_script = repository.get("entry_script")
        if make_executable(project_dir / entry_script):
            LOGGER.info("Made %s executable", entry_script)
        else:
            LOGGER.warning("Entry script %s not found in %s", entry_script, project_dir)
        return project_dir, cloned, env_created

    def verify_installation(self, project_dir: Path) -> None:
        """Печатает версии инструментов и запускает hello-world; сбой фатален."""

        LOGGER.info("Verifying installation...")
        compose = ComposeProject(
            self._runner,
            project_dir,
            self._settings.get_value("stack", "compose_command"),
        )
        for title, result in (
            ("Docker", self._runner.run(["docker", "--version"], check=False)),
            ("Docker Compose", compose.version()),
            ("Git", self._runner.run(["git", "--version"], check=False)),
        ):
            first_line = next(iter(result.lines()), "not available")
            LOGGER.info("%s version: %s", title, first_line)

        image = self._settings.get_value("stack", "smoke_test_image")
        LOGGER.info("Testing Docker with %s...", image)
        try:
            LOGGER.info("Docker Engine version: %s", self._docker.version())
            run_smoke_test(self._docker, image)
        except DockerAPIError as exc:
            raise SmokeTestError(image, exc.reason) from exc
        LOGGER.info("Docker test passed")

    # --------------------------------------------------------------- helpers --
    def _run_step(self, description: str, args: tuple[str, ...], ignore_errors: bool) -> None:
        LOGGER.info("%s...", description)
        result = self._runner.run(list(args), check=not ignore_errors)
        if not result.ok:
            LOGGER.debug("Ignoring failure of %s (exit %s)", args[0], result.returncode)

    def _add_docker_apt_repository(self) -> None:
        """Добавляет ключ и apt-источник download.docker.com."""

        distro = "debian" if "Debian" in self._env.os_name else "ubuntu"
        LOGGER.info("Adding Docker apt repository for %s...", distro)
        key_url = DOCKER_KEY_URL.format(distro=distro)
        with tempfile.TemporaryDirectory() as tmp_dir:
            armored_key = Path(tmp_dir) / "docker.asc"
            try:
                self._probe.download(key_url, armored_key)
            except httpx.HTTPError as exc:
                raise CommandError(["download", key_url], 1, str(exc)) from exc
            self._keyring_path.parent.mkdir(parents=True, exist_ok=True)
            self._runner.run(
                [
                    "gpg",
                    "--batch",
                    "--yes",
                    "--dearmor",
                    "-o",
                    str(self._keyring_path),
                    str(armored_key),
                ]
            )
        arch = self._runner.run(["dpkg", "--print-architecture"]).output.strip()
        codename = self._runner.run(["lsb_release", "-cs"]).output.strip()
        line = (
            f"deb [arch={arch} signed-by={self._keyring_path}] "
            f"{DOCKER_APT_URL.format(distro=distro)} {codename} stable\n"
        )
        self._apt_source_path.parent.mkdir(parents=True, exist_ok=True)
        self._apt_source_path.write_text(line, encoding="utf-8")

    def _log_summary(self, report: ProvisionReport) -> None:
        ports = ", ".join(str(port) for port in self._settings.get_value("network", "firewall_ports"))
        env_path = report.project_dir / self._settings.get_value("stack", "env_file")
        metrics = read_system_metrics(report.project_dir)
        LOGGER.info("SERVER SETUP COMPLETED SUCCESSFULLY")
        LOGGER.info(
            "Installed: Docker CE, Docker Compose %s, git, firewall (ports: %s)",
            report.compose_version,
            ports,
        )
        LOGGER.info(
            "Repository: %s -> %s (%s)",
            self._settings.get_value("repository", "url"),
            report.project_dir,
            "cloned" if report.cloned else "updated",
        )
        LOGGER.info("Host: RAM %s, CPU %s, disk %s", metrics.ram, metrics.cpu, metrics.disk)
        LOGGER.info("Next steps:")
        LOGGER.info("  1. Re-login so the docker group membership applies")
        LOGGER.info("  2. Configure ALL values in %s (N8N_HOST, N8N_OWNER_EMAIL, ...)", env_path)
        LOGGER.info("  3. cd %s && n8n-deploy-start", report.project_dir)
        LOGGER.info("SSL certificates will be issued automatically on first run")
