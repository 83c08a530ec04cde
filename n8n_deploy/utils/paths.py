"""Централизованное описание путей n8n-deploy."""

from __future__ import annotations

import os
from pathlib import Path

# CONFIG_DIR: базовая директория, где сохраняются config.json и логи
CONFIG_DIR = Path(os.environ.get("N8N_DEPLOY_HOME", Path.home())) / ".n8n-deploy"

OS_RELEASE_PATH = Path("/etc/os-release")
