"""Обновление и перезапуск стека n8n с ожиданием готовности.

Процедура проходит фазы строго по порядку:

    PREFLIGHT → SYNC_REPO → SYNC_IMAGE → RECREATE_STACK → WAIT_CONTAINERS
    → WAIT_HEALTH → WAIT_SSL → DONE

Фатальные ошибки (нет .env, недоступен Docker или сеть, контейнеры не
поднялись) поднимаются как DeployError. Таймауты health и SSL только
предупреждают и не меняют код возврата.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from n8n_deploy.commands.executor import CommandRunner
from n8n_deploy.docker_api.client import DockerClientWrapper
from n8n_deploy.docker_api.compose import ComposeProject
from n8n_deploy.docker_api.containers import (
    all_running,
    fetch_logs,
    container_statuses,
    prune_containers,
)
from n8n_deploy.docker_api.exceptions import DockerAPIError
from n8n_deploy.docker_api.images import get_image_id, prune_images, pull_image
from n8n_deploy.docker_api.volumes import matching_volumes, volume_exists
from n8n_deploy.envfile import read_env_value
from n8n_deploy.exceptions import (
    DockerUnavailableError,
    MissingConfigError,
    NetworkUnreachableError,
    ReadinessTimeoutError,
)
from n8n_deploy.polling import PollPolicy, poll_until
from n8n_deploy.probes import HttpProbe
from n8n_deploy.repository import sync_repository
from n8n_deploy.settings.registry import SettingsRegistry
from n8n_deploy.utils.system_metrics import read_system_metrics

LOGGER = logging.getLogger(__name__)


class Phase(str, Enum):
    """Фазы одного запуска."""

    PREFLIGHT = "preflight"
    SYNC_REPO = "sync_repo"
    SYNC_IMAGE = "sync_image"
    RECREATE_STACK = "recreate_stack"
    WAIT_CONTAINERS = "wait_containers"
    WAIT_HEALTH = "wait_health"
    WAIT_SSL = "wait_ssl"
    DONE = "done"


@dataclass(slots=True)
class ReconcileReport:
    """Что изменилось и какие проверки прошли за запуск."""

    phase: Phase = Phase.PREFLIGHT
    repo_updated: bool = False
    image_updated: bool = False
    data_volume_found: bool = False
    container_attempts: int = 0
    health_ok: bool = False
    ssl_ok: bool = False
    domain: str = ""

    @property
    def warnings(self) -> list[str]:
        result = []
        if not self.health_ok:
            result.append("health check timed out")
        if not self.ssl_ok:
            result.append("SSL endpoint not reachable yet")
        return result


class Reconciler:
    """Приводит стек к запущенному и доступному снаружи состоянию."""

    def __init__(
        self,
        settings: SettingsRegistry,
        project_dir: Path,
        *,
        runner: CommandRunner,
        docker: DockerClientWrapper,
        probe: HttpProbe,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings
        self.project_dir = project_dir
        self._runner = runner
        self._docker = docker
        self._probe = probe
        self._sleep = sleep
        self._stack = settings.get_group("stack")
        self._network = settings.get_group("network")
        self._polling = settings.get_group("polling")
        self.compose = ComposeProject(runner, project_dir, self._stack.get("compose_command"))
        self.report = ReconcileReport()

    @property
    def env_path(self) -> Path:
        return self.project_dir / self._stack.get("env_file")

    def run(self) -> ReconcileReport:
        """Выполняет все фазы; DeployError из фатальной фазы прерывает запуск."""

        self._enter(Phase.PREFLIGHT)
        self.preflight()
        self._enter(Phase.SYNC_REPO)
        self.sync_repo()
        self._enter(Phase.SYNC_IMAGE)
        self.sync_image()
        self._enter(Phase.RECREATE_STACK)
        self.recreate_stack()
        self._enter(Phase.WAIT_CONTAINERS)
        self.wait_containers()
        self._enter(Phase.WAIT_HEALTH)
        self.wait_health()
        self._enter(Phase.WAIT_SSL)
        self.wait_ssl()
        self._enter(Phase.DONE)
        self.show_final_status()
        return self.report

    # ---------------------------------------------------------------- phases --
    def preflight(self) -> None:
        """Проверяет .env, Docker daemon (с одной попыткой запуска) и интернет."""

        LOGGER.info("Running pre-flight checks...")
        if not self.env_path.is_file():
            LOGGER.error("Create and configure your %s before continuing:", self.env_path.name)
            LOGGER.error("  cp .env.example %s && nano %s", self.env_path.name, self.env_path.name)
            raise MissingConfigError(self.env_path)

        if not self._docker.ping():
            LOGGER.warning("Docker is not running, attempting to start...")
            if self._runner.which("systemctl"):
                self._runner.run(["systemctl", "start", "docker"], check=False)
                self._sleep(self._polling.get("docker_start_wait_sec"))
            if not self._docker.ping():
                raise DockerUnavailableError("daemon did not respond after start attempt")
            LOGGER.info("Docker started successfully")

        url = self._network.get("connectivity_url")
        if not self._probe.reachable(url, self._network.get("connectivity_timeout_sec")):
            raise NetworkUnreachableError(url)
        LOGGER.info("Pre-flight checks completed")

    def sync_repo(self) -> None:
        repository = self._settings.get_group("repository")
        self.report.repo_updated = sync_repository(
            self._runner,
            self.project_dir,
            repository.get("branch"),
            repository.get("entry_script"),
        )

    def sync_image(self) -> None:
        """Всегда скачивает образ; сравнение id только для отчёта."""

        image = self._stack.get("image")
        LOGGER.info("Checking for N8N updates (%s)...", image)
        before = get_image_id(self._docker, image)
        pull_image(self._docker, image)
        after = get_image_id(self._docker, image)
        self.report.image_updated = before != after
        if self.report.image_updated:
            LOGGER.info("N8N image updated (%s -> %s)", before or "none", after)
        else:
            LOGGER.info("N8N image is up to date")

    def recreate_stack(self) -> None:
        """down → prune → pull → up -d; выполняется при каждом запуске."""

        LOGGER.info("Stopping existing services...")
        self.compose.down(remove_orphans=True)
        LOGGER.info("Cleaning up unused resources...")
        prune_containers(self._docker)
        prune_images(self._docker)
        LOGGER.info("Updating Docker images...")
        self.compose.pull()

        data_volume = self._stack.get("data_volume")
        try:
            self.report.data_volume_found = volume_exists(self._docker, data_volume)
        except DockerAPIError as exc:
            LOGGER.warning("Cannot check data volume %s: %s", data_volume, exc.reason)
        if self.report.data_volume_found:
            LOGGER.info("Data volume found - workflows will be preserved")
        else:
            LOGGER.info("Creating new data volume for workflows")

        LOGGER.info("Starting services...")
        self.compose.up(detached=True)

    def wait_containers(self) -> None:
        names = self._stack.get("containers")
        try:
            result = poll_until(
                lambda: all_running(self._docker, names),
                attempts=self._polling.get("containers_attempts"),
                interval=self._polling.get("containers_interval_sec"),
                policy=PollPolicy.FATAL,
                description="services to start",
                sleep=self._sleep,
            )
        except ReadinessTimeoutError:
            self._log_diagnostics(names)
            raise
        self.report.container_attempts = result.attempts
        LOGGER.info("All services are running")

    def wait_health(self) -> None:
        url = self._network.get("healthcheck_url")
        timeout = self._network.get("health_timeout_sec")
        result = poll_until(
            lambda: self._probe.reachable(url, timeout),
            attempts=self._polling.get("health_attempts"),
            interval=self._polling.get("health_interval_sec"),
            initial_delay=self._polling.get("health_initial_delay_sec"),
            policy=PollPolicy.ADVISORY,
            description="N8N health check",
            sleep=self._sleep,
        )
        self.report.health_ok = result.succeeded
        if result.succeeded:
            LOGGER.info("N8N health check passed")
        else:
            LOGGER.warning("N8N health check timeout - this may be normal during SSL setup")

    def wait_ssl(self) -> None:
        domain = read_env_value(self.env_path, "N8N_HOST")
        self.report.domain = domain
        if not domain:
            LOGGER.warning("N8N_HOST is not set in %s, skipping SSL verification", self.env_path.name)
            return

        LOGGER.info("Waiting for SSL certificates (first-time setup may take 5 minutes)...")
        timeout = self._network.get("ssl_timeout_sec")
        result = poll_until(
            lambda: self._probe.reachable(f"https://{domain}", timeout),
            attempts=self._polling.get("ssl_attempts"),
            interval=self._polling.get("ssl_interval_sec"),
            initial_delay=self._polling.get("ssl_initial_delay_sec"),
            policy=PollPolicy.ADVISORY,
            description=f"SSL on {domain}",
            sleep=self._sleep,
        )
        self.report.ssl_ok = result.succeeded
        if result.succeeded:
            LOGGER.info("SSL is working correctly")
            return
        LOGGER.warning("SSL setup is taking longer than expected")
        LOGGER.info("This is normal for first-time certificate generation")
        ssl_container = self._stack.get("ssl_container")
        LOGGER.info("Check SSL logs: docker logs %s", ssl_container)
        try:
            tail = fetch_logs(self._docker, ssl_container, tail=self._stack.get("logs_tail"))
        except DockerAPIError as exc:
            LOGGER.debug("Cannot read %s logs: %s", ssl_container, exc.reason)
            return
        for line in tail.splitlines():
            LOGGER.info("  %s", line)

    def show_final_status(self) -> None:
        LOGGER.info("N8N IS RUNNING")
        LOGGER.info("Service status:")
        for line in self.compose.ps().lines():
            LOGGER.info("  %s", line)
        LOGGER.info("Data volumes:")
        try:
            volumes = matching_volumes(self._docker, self._stack.get("volumes"))
        except DockerAPIError as exc:
            LOGGER.warning("Cannot list data volumes: %s", exc.reason)
            volumes = []
        for volume in volumes:
            LOGGER.info("  %s (%s)", volume["name"], volume["driver"])
        metrics = read_system_metrics(self.project_dir)
        LOGGER.info("Host: RAM %s, CPU %s, disk %s", metrics.ram, metrics.cpu, metrics.disk)
        if self.report.domain:
            LOGGER.info("Access N8N at: https://%s", self.report.domain)
        LOGGER.info("Useful commands:")
        compose = " ".join(self.compose.command)
        LOGGER.info("  View all logs:   %s logs -f", compose)
        for name in self._stack.get("containers"):
            LOGGER.info("  View %s logs:   docker logs %s -f", name, name)
        LOGGER.info("  Stop services:   %s down", compose)
        LOGGER.info("  Restart all:     n8n-deploy-start")
        for warning in self.report.warnings:
            LOGGER.warning("Advisory: %s", warning)
        LOGGER.info("N8N startup completed successfully!")

    # --------------------------------------------------------------- helpers --
    def _enter(self, phase: Phase) -> None:
        self.report.phase = phase
        LOGGER.debug("Phase: %s", phase.value)

    def _log_diagnostics(self, names: list[str]) -> None:
        LOGGER.error("Services failed to start properly")
        for name, status in container_statuses(self._docker, names).items():
            LOGGER.error("  %s: %s", name, status or "missing")
        LOGGER.error("Service status:")
        for line in self.compose.ps().lines():
            LOGGER.error("  %s", line)
        LOGGER.error("Recent logs:")
        for line in self.compose.logs(tail=self._stack.get("logs_tail")).lines():
            LOGGER.error("  %s", line)
