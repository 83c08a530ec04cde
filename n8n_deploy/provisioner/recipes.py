"""Рецепты установки Docker и firewall для поддерживаемых семейств ОС."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from n8n_deploy.exceptions import UnsupportedOSError
from n8n_deploy.host.models import OSFamily

BASE_TOOLS = ("curl", "wget", "git", "unzip", "nano", "htop", "net-tools")
DOCKER_PACKAGES = (
    "docker-ce",
    "docker-ce-cli",
    "containerd.io",
    "docker-buildx-plugin",
    "docker-compose-plugin",
)


@dataclass(frozen=True, slots=True)
class CommandStep:
    """Одна команда рецепта; ignore_errors для шагов вроде удаления старых пакетов."""

    description: str
    args: Tuple[str, ...]
    ignore_errors: bool = False


@dataclass(frozen=True, slots=True)
class InstallRecipe:
    """Последовательность установки для семейства ОС."""

    family: OSFamily
    prepare: Tuple[CommandStep, ...]
    docker: Tuple[CommandStep, ...]
    firewall: Tuple[CommandStep, ...]
    needs_apt_repository: bool = False


def debian_recipe(ports: Iterable[int]) -> InstallRecipe:
    apt_env = ("env", "DEBIAN_FRONTEND=noninteractive")
    return InstallRecipe(
        family=OSFamily.DEBIAN,
        prepare=(
            CommandStep("Updating package index", ("apt-get", "update", "-qq")),
            CommandStep("Upgrading system", (*apt_env, "apt-get", "upgrade", "-y", "-qq")),
            CommandStep(
                "Installing basic tools",
                (
                    *apt_env,
                    "apt-get",
                    "install",
                    "-y",
                    "-qq",
                    *BASE_TOOLS,
                    "software-properties-common",
                    "apt-transport-https",
                    "ca-certificates",
                    "gnupg",
                    "lsb-release",
                    "ufw",
                ),
            ),
            CommandStep(
                "Removing old Docker packages",
                ("apt-get", "remove", "-y", "-qq", "docker", "docker-engine", "docker.io", "containerd", "runc"),
                ignore_errors=True,
            ),
        ),
        docker=(
            CommandStep("Updating package index", ("apt-get", "update", "-qq")),
            CommandStep(
                "Installing Docker",
                (*apt_env, "apt-get", "install", "-y", "-qq", *DOCKER_PACKAGES),
            ),
        ),
        firewall=(
            CommandStep("Enabling ufw", ("ufw", "--force", "enable")),
            *(
                CommandStep(f"Opening port {port}/tcp", ("ufw", "allow", f"{port}/tcp"))
                for port in ports
            ),
        ),
        needs_apt_repository=True,
    )


def rhel_recipe(ports: Iterable[int]) -> InstallRecipe:
    return InstallRecipe(
        family=OSFamily.RHEL,
        prepare=(
            CommandStep("Updating system", ("yum", "update", "-y", "-q")),
            CommandStep(
                "Installing basic tools",
                (
                    "yum",
                    "install",
                    "-y",
                    "-q",
                    *BASE_TOOLS,
                    "yum-utils",
                    "device-mapper-persistent-data",
                    "lvm2",
                ),
            ),
            CommandStep(
                "Removing old Docker packages",
                (
                    "yum",
                    "remove",
                    "-y",
                    "-q",
                    "docker",
                    "docker-client",
                    "docker-client-latest",
                    "docker-common",
                    "docker-latest",
                    "docker-latest-logrotate",
                    "docker-logrotate",
                    "docker-engine",
                ),
                ignore_errors=True,
            ),
        ),
        docker=(
            CommandStep(
                "Adding Docker repository",
                (
                    "yum-config-manager",
                    "--add-repo",
                    "https://download.docker.com/linux/centos/docker-ce.repo",
                ),
            ),
            CommandStep("Installing Docker", ("yum", "install", "-y", "-q", *DOCKER_PACKAGES)),
        ),
        # firewalld может отсутствовать на облачных образах
        firewall=(
            CommandStep("Starting firewalld", ("systemctl", "start", "firewalld"), ignore_errors=True),
            CommandStep("Enabling firewalld", ("systemctl", "enable", "firewalld"), ignore_errors=True),
            *(
                CommandStep(
                    f"Opening port {port}/tcp",
                    ("firewall-cmd", "--permanent", f"--add-port={port}/tcp"),
                    ignore_errors=True,
                )
                for port in ports
            ),
            CommandStep("Reloading firewalld", ("firewall-cmd", "--reload"), ignore_errors=True),
        ),
    )


def recipe_for(family: OSFamily, ports: Iterable[int], os_name: str = "") -> InstallRecipe:
    """Рецепт для семейства; для UNSUPPORTED поднимает UnsupportedOSError."""

    port_list = list(ports)
    if family is OSFamily.DEBIAN:
        return debian_recipe(port_list)
    if family is OSFamily.RHEL:
        return rhel_recipe(port_list)
    raise UnsupportedOSError(
        os_name,
        reason="supported systems: Ubuntu, Debian, CentOS, RHEL, Amazon Linux",
    )
