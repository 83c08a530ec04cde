"""Тесты рецептов установки по семействам ОС."""

from __future__ import annotations

import pytest

from n8n_deploy.exceptions import UnsupportedOSError
from n8n_deploy.host.models import OSFamily
from n8n_deploy.provisioner.recipes import recipe_for


def test_debian_recipe_uses_apt_and_ufw() -> None:
    recipe = recipe_for(OSFamily.DEBIAN, [22, 80, 443])

    assert recipe.needs_apt_repository
    assert recipe.prepare[0].args == ("apt-get", "update", "-qq")
    assert ("ufw", "--force", "enable") == recipe.firewall[0].args
    assert [step.args for step in recipe.firewall[1:]] == [
        ("ufw", "allow", "22/tcp"),
        ("ufw", "allow", "80/tcp"),
        ("ufw", "allow", "443/tcp"),
    ]
    assert "docker-compose-plugin" in recipe.docker[-1].args


def test_old_packages_removal_is_optional() -> None:
    for family in (OSFamily.DEBIAN, OSFamily.RHEL):
        removal = [step for step in recipe_for(family, [22]).prepare if "remove" in step.args]
        assert len(removal) == 1
        assert removal[0].ignore_errors


def test_rhel_recipe_opens_configured_ports() -> None:
    recipe = recipe_for(OSFamily.RHEL, [22, 8443])

    assert not recipe.needs_apt_repository
    assert recipe.prepare[0].args[0] == "yum"
    port_steps = [step.args for step in recipe.firewall if step.args[0] == "firewall-cmd"]
    assert ("firewall-cmd", "--permanent", "--add-port=8443/tcp") in port_steps
    assert port_steps[-1] == ("firewall-cmd", "--reload")
    assert all(step.ignore_errors for step in recipe.firewall)


def test_unsupported_family_raises() -> None:
    with pytest.raises(UnsupportedOSError) as exc_info:
        recipe_for(OSFamily.UNSUPPORTED, [22], "Arch Linux")
    assert "Arch Linux" in str(exc_info.value)
