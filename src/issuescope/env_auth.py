"""Environment-based authentication for IssueScope.

Resolves the GitHub token from environment variables, optionally after
loading a ``.env`` file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .logging import get_logger

TOKEN_FALLBACK_VARS = (
    "GH_TOKEN",
    "GITHUB_ACCESS_TOKEN",
    "GITHUB_PAT",
    "REACT_APP_GITHUB_PERSONAL_ACCESS_TOKEN",
)


@dataclass
class EnvAuthConfig:
    """Configuration for environment-based authentication."""

    load_dotenv: bool = True
    dotenv_path: str | None = None
    github_token_var: str = "GITHUB_TOKEN"
    fallback_vars: tuple[str, ...] = field(default=TOKEN_FALLBACK_VARS)


class EnvironmentAuthManager:
    """Manages authentication through environment variables and .env files."""

    def __init__(self, config: EnvAuthConfig):
        self.config = config
        self.logger = get_logger()
        self._dotenv_loaded = False
        if config.load_dotenv:
            self._load_dotenv()

    @property
    def dotenv_loaded(self) -> bool:
        return self._dotenv_loaded

    def _load_dotenv(self) -> None:
        """Load .env file if available."""
        if self.config.dotenv_path:
            candidates = [self.config.dotenv_path]
        else:
            candidates = ['.env', '.env.local']
        for location in candidates:
            env_path = Path(location)
            if env_path.exists():
                load_dotenv(str(env_path))
                self._dotenv_loaded = True
                self.logger.debug(f"Loaded environment variables from {env_path}")
                break

    def get_github_token(self) -> str | None:
        """Get GitHub token from environment variables."""
        token = os.getenv(self.config.github_token_var)
        if token:
            self.logger.debug("Found GitHub token in environment variables")
            return token

        for alt_var in self.config.fallback_vars:
            token = os.getenv(alt_var)
            if token:
                self.logger.debug(f"Found GitHub token in {alt_var}")
                return token

        return None

    def get_authentication_recommendations(self) -> list[str]:
        if self.get_github_token():
            return []
        return [
            f"Set {self.config.github_token_var} environment variable",
            f"Or create .env file with {self.config.github_token_var}=your_token",
        ]


def create_env_auth_manager(config: EnvAuthConfig | None = None) -> EnvironmentAuthManager:
    """Factory function to create environment authentication manager."""
    if config is None:
        config = EnvAuthConfig()
    return EnvironmentAuthManager(config)


__all__ = [
    "EnvAuthConfig",
    "EnvironmentAuthManager",
    "TOKEN_FALLBACK_VARS",
    "create_env_auth_manager",
]
