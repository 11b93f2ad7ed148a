"""Runtime settings loaded from the process environment and an optional ``.env`` file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import dotenv_values

from errors import ConfigurationError

__all__ = ["Settings", "load_settings"]

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


@dataclass(frozen=True)
class Settings:
    """Connection details for the upstream Gitea instance plus server options."""

    gitea_url: str
    gitea_token: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    @classmethod
    def from_mapping(cls, source: Mapping[str, str | None]) -> "Settings":
        gitea_url = (source.get("GITEA_URL") or "").strip()
        gitea_token = (source.get("GITEA_TOKEN") or "").strip()
        missing = [
            name
            for name, value in (("GITEA_URL", gitea_url), ("GITEA_TOKEN", gitea_token))
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"{' and '.join(missing)} must be set in the environment or a .env file"
            )

        raw_port = source.get("GATEWAY_PORT") or str(DEFAULT_PORT)
        try:
            port = int(raw_port)
        except ValueError:
            raise ConfigurationError(f"GATEWAY_PORT must be an integer, got {raw_port!r}") from None

        log_level = (source.get("LOG_LEVEL") or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigurationError(f"LOG_LEVEL must be a logging level name, got {log_level!r}")

        return cls(
            gitea_url=gitea_url.rstrip("/"),
            gitea_token=gitea_token,
            host=source.get("GATEWAY_HOST") or DEFAULT_HOST,
            port=port,
            log_level=log_level,
        )


def load_settings(
    env: Mapping[str, str] | None = None,
    env_file: str | os.PathLike[str] | None = ".env",
) -> Settings:
    """Build settings, letting system environment values override the ``.env`` file."""

    merged: dict[str, str | None] = {}
    if env_file is not None and os.path.exists(env_file):
        merged.update(dotenv_values(env_file))
    source = os.environ if env is None else env
    merged.update({key: value for key, value in source.items() if value})
    return Settings.from_mapping(merged)
