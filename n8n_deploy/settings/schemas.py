"""Дефолтная схема config.json."""

from __future__ import annotations

from typing import Any, Dict

from n8n_deploy.settings.groups import (
    LoggingSettings,
    NetworkSettings,
    PollingSettings,
    RepositorySettings,
    SettingsGroup,
    StackSettings,
)

SETTINGS_GROUPS: tuple[type[SettingsGroup], ...] = (
    LoggingSettings,
    RepositorySettings,
    StackSettings,
    NetworkSettings,
    PollingSettings,
)

# DEFAULT_CONFIG служит шаблоном для начального config.json
DEFAULT_CONFIG: Dict[str, Any] = {
    "version": "1.0.0",
    **{group_cls.group_name: group_cls().to_dict() for group_cls in SETTINGS_GROUPS},
}
