# infrastructure/secrets/env_secret_provider.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import dotenv_values

USER_ENV = "LOAD_EGGS_USER"
PASS_ENV = "LOAD_EGGS_PASS"


class EnvSecretProvider:
    """
    Credentials for the example harness, from a .env file and the process
    environment. The process environment wins, so a CI job can override a
    checked-in .env. The toolkit itself never reads the environment.
    """

    def __init__(self, env_path: Optional[Path] = None):
        self._env_vars: Dict[str, Any] = {}
        if env_path is not None and env_path.exists():
            self._env_vars.update({k: v for k, v in dotenv_values(env_path).items() if v is not None})
        self._env_vars.update(os.environ)

    def get(self) -> Dict[str, Any]:
        return dict(self._env_vars)

    def login_overrides(self) -> Dict[str, str]:
        """username/password keys for the values that are set."""
        overrides: Dict[str, str] = {}
        if self._env_vars.get(USER_ENV):
            overrides["username"] = self._env_vars[USER_ENV]
        if self._env_vars.get(PASS_ENV):
            overrides["password"] = self._env_vars[PASS_ENV]
        return overrides
