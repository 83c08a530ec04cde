"""Точки входа n8n-deploy-setup и n8n-deploy-start."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from n8n_deploy import __version__
from n8n_deploy.commands.executor import CommandRunner
from n8n_deploy.docker_api.client import DockerClientWrapper
from n8n_deploy.exceptions import DeployError, PrivilegeError
from n8n_deploy.host.detect import build_environment
from n8n_deploy.probes import HttpProbe
from n8n_deploy.provisioner.runner import Provisioner
from n8n_deploy.reconciler.runner import Reconciler
from n8n_deploy.settings.registry import SettingsRegistry
from n8n_deploy.utils.helpers import is_root
from n8n_deploy.utils.logger import configure_logging
from n8n_deploy.utils.paths import CONFIG_DIR, OS_RELEASE_PATH

LOGGER = logging.getLogger(__name__)


def initialize_settings(config_path: Path) -> SettingsRegistry:
    """Получает singleton реестр настроек и загружает config.json."""

    registry = SettingsRegistry(config_path=config_path)
    registry.load_from_disk()
    return registry


def setup_logging_from_settings(base_dir: Path, settings: SettingsRegistry) -> None:
    """Настраивает логирование в соответствии с группой logging."""

    logging_settings = settings.get_group("logging")
    if not logging_settings.get("enabled"):
        logging.disable(logging.CRITICAL)
        return

    logging.disable(logging.NOTSET)
    configure_logging(
        log_dir=base_dir / "logs",
        level_name=logging_settings.get("level"),
        max_bytes=logging_settings.get("max_file_size_mb") * 1024 * 1024,
        backup_count=logging_settings.get("max_archived_files"),
    )


def bootstrap(base_dir: Path = CONFIG_DIR) -> SettingsRegistry:
    """Базовое логирование, затем config.json и логирование по его настройкам."""

    configure_logging(base_dir / "logs")
    settings = initialize_settings(base_dir / "config.json")
    setup_logging_from_settings(base_dir, settings)
    return settings


def run_setup(settings: SettingsRegistry, os_release_path: Optional[Path] = None) -> int:
    """Подготовка хоста; возвращает код завершения."""

    LOGGER.info("N8N DEPLOY %s - SERVER SETUP", __version__)
    probe = HttpProbe()
    try:
        if not is_root():
            raise PrivilegeError("Usage: sudo n8n-deploy-setup")
        environment = build_environment(os_release_path or OS_RELEASE_PATH)
        provisioner = Provisioner(
            settings,
            environment,
            runner=CommandRunner(),
            docker=DockerClientWrapper(settings.get_value("stack", "docker_socket")),
            probe=probe,
        )
        provisioner.run()
    except DeployError as exc:
        LOGGER.error("Setup aborted: %s", exc.message)
        return 1
    finally:
        probe.close()
    return 0


def run_start(settings: SettingsRegistry, project_dir: Path) -> int:
    """Обновление и перезапуск стека; advisory-предупреждения не влияют на код."""

    LOGGER.info("N8N DEPLOY %s - START & UPDATE", __version__)
    LOGGER.info("Repository: %s", settings.get_value("repository", "url"))
    probe = HttpProbe()
    try:
        reconciler = Reconciler(
            settings,
            project_dir,
            runner=CommandRunner(),
            docker=DockerClientWrapper(settings.get_value("stack", "docker_socket")),
            probe=probe,
        )
        reconciler.run()
    except DeployError as exc:
        LOGGER.error("Start aborted: %s", exc.message)
        return 1
    finally:
        probe.close()
    return 0


def setup_main() -> int:
    try:
        settings = bootstrap()
    except DeployError:
        return 1
    return run_setup(settings)


def start_main() -> int:
    try:
        settings = bootstrap()
    except DeployError:
        return 1
    return run_start(settings, Path.cwd())


if __name__ == "__main__":
    sys.exit(start_main())
