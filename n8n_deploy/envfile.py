"""Файл .env с параметрами n8n: пустой шаблон и чтение отдельных значений."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import dotenv_values

LOGGER = logging.getLogger(__name__)

ENV_TEMPLATE = """\
# N8N Configuration - REQUIRED: Configure all values before running n8n-deploy-start
# Copy from .env.example and customize with your actual values

# Core Settings
N8N_HOST=
N8N_PROTOCOL=
WEBHOOK_URL=
VUE_APP_URL=
TIMEZONE=

# Security Settings
N8N_USER_MANAGEMENT_DISABLED=
N8N_OWNER_EMAIL=
N8N_OWNER_PASSWORD=

# Optional Settings
N8N_BASIC_AUTH_ACTIVE=
GOOGLE_OAUTH_CLIENT_ID=
GOOGLE_OAUTH_CLIENT_SECRET=
N8N_PAYLOAD_SIZE_MAX=
N8N_METRICS=
N8N_LOG_LEVEL=
N8N_PERSISTED_BINARY_DATA_TTL=

# SSL Configuration
LETSENCRYPT_EMAIL=
"""

ENV_FILE_MODE = 0o600


def write_blank_env(path: Path) -> bool:
    """Создаёт шаблон .env с правами 600. Существующий файл не трогает.

    Возвращает True, если файл был создан.
    """

    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, ENV_FILE_MODE)
    except FileExistsError:
        LOGGER.warning("%s file already exists, leaving it untouched", path.name)
        return False
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(ENV_TEMPLATE)
    path.chmod(ENV_FILE_MODE)
    LOGGER.info("Created empty %s file - configuration required", path.name)
    return True


def read_env_value(path: Path, key: str) -> str:
    """Значение ключа из .env или пустая строка, если ключ не задан."""

    value = dotenv_values(path).get(key)
    return (value or "").strip()
