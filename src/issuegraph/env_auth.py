"""Environment-based authentication for issuegraph.

The Linear API key is read from the environment, optionally seeded from a
``.env`` file via python-dotenv.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .config import DEFAULT_API_KEY_VAR, ConfigError, GraphConfig
from .logging import get_logger

ALTERNATIVE_KEY_VARS = ("LINEAR_TOKEN", "LINEAR_ACCESS_TOKEN")
DOTENV_LOCATIONS = (".env", ".env.local")


def get_env(key: str) -> str:
    """Return a required environment variable or raise ConfigError."""
    raw_value = os.getenv(key)
    if not raw_value:
        raise ConfigError(f'Environment Variable "{key}" not found.')
    return raw_value


@dataclass
class EnvAuthConfig:
    """Configuration for environment-based authentication."""

    load_dotenv: bool = True
    dotenv_path: str | None = None
    api_key_var: str = DEFAULT_API_KEY_VAR

    @classmethod
    def from_graph_config(cls, cfg: GraphConfig) -> EnvAuthConfig:
        return cls(
            load_dotenv=cfg.env_load_dotenv,
            dotenv_path=cfg.env_dotenv_path,
            api_key_var=cfg.api_key_var,
        )


class EnvironmentAuthManager:
    """Manages authentication through environment variables and .env files."""

    def __init__(self, config: EnvAuthConfig):
        self.config = config
        self.logger = get_logger()
        self.dotenv_loaded: Path | None = None

        if config.load_dotenv:
            self._load_dotenv()

    def _load_dotenv(self) -> None:
        """Load the first .env file found; existing variables win."""
        candidates = (
            [self.config.dotenv_path] if self.config.dotenv_path else list(DOTENV_LOCATIONS)
        )
        for location in candidates:
            env_path = Path(location)
            if env_path.exists():
                load_dotenv(str(env_path))
                self.dotenv_loaded = env_path
                self.logger.debug(f"Loaded environment variables from {env_path}")
                return
        if self.config.dotenv_path:
            self.logger.warning(f"dotenv file not found: {self.config.dotenv_path}")

    def get_api_key(self) -> str | None:
        """Get the Linear API key from environment variables."""
        token = os.getenv(self.config.api_key_var)
        if token:
            return token
        for alt_var in ALTERNATIVE_KEY_VARS:
            token = os.getenv(alt_var)
            if token:
                self.logger.debug(f"Found Linear API key in {alt_var}")
                return token
        return None

    def require_api_key(self) -> str:
        token = self.get_api_key()
        if token:
            return token
        # Reuse get_env so the message matches other missing-variable failures
        return get_env(self.config.api_key_var)

    def get_authentication_recommendations(self) -> list[str]:
        if self.get_api_key():
            return []
        return [
            f"Set {self.config.api_key_var} environment variable",
            f"Or create .env file with {self.config.api_key_var}=your_key",
            "Create a personal API key under Linear > Settings > API",
        ]

    def create_sample_env_file(self, path: str = '.env') -> bool:
        """Create a sample .env file; returns False when one already exists."""
        sample_content = f"""# issuegraph environment configuration

# Linear personal API key
{self.config.api_key_var}=your_linear_api_key_here
"""
        env_path = Path(path)
        if env_path.exists():
            self.logger.debug(f"Environment file already exists: {env_path}")
            return False
        env_path.write_text(sample_content, encoding='utf-8')
        self.logger.log_operation("sample_env_created", file_path=str(env_path))
        return True


def create_env_auth_manager(config: EnvAuthConfig | None = None) -> EnvironmentAuthManager:
    """Factory function to create environment authentication manager."""
    if config is None:
        config = EnvAuthConfig()
    return EnvironmentAuthManager(config)


__all__ = [
    "EnvAuthConfig",
    "EnvironmentAuthManager",
    "create_env_auth_manager",
    "get_env",
]
