from __future__ import annotations

import os
from pathlib import Path

APP_ENV_HOME = "EQBAL_HOME"
APP_ENV_CONFIG = "EQBAL_CONFIG"


def project_root() -> Path:
    """
    Repository/project root directory.
    Contains eqbal/, api/, cli/, config/.
    Override with EQBAL_HOME.
    """
    if os.environ.get(APP_ENV_HOME):
        return Path(os.environ[APP_ENV_HOME]).expanduser().resolve()
    return Path(__file__).parent.parent.resolve()


def config_dir() -> Path:
    return project_root() / "config"


def config_path() -> Path:
    """
    Timeline configuration file.

    Resolution order:
    1. EQBAL_CONFIG env var (explicit override)
    2. <project_root>/config/timeline.yaml (default)
    """
    if os.environ.get(APP_ENV_CONFIG):
        return Path(os.environ[APP_ENV_CONFIG]).expanduser().resolve()
    return config_dir() / "timeline.yaml"
