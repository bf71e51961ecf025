# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Server configuration - port, host and site directory, read once at startup."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

from genro_toolbox import SmartOptions  # type: ignore[import-untyped]

__all__ = ["ServerConfig", "DEFAULTS", "DEFAULT_SITE_DIR", "parse_flag", "parse_port"]

logger = logging.getLogger("portfolio_site.config")

DEFAULT_SITE_DIR = Path(__file__).parent / "site"

DEFAULTS = {
    "host": "0.0.0.0",
    "port": 8080,
    "site_dir": str(DEFAULT_SITE_DIR),
    "log_level": "INFO",
    "debug": False,
    "access_log": True,
}

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

# environment variable -> option name
ENV_VARS = {
    "PORT": "port",
    "HOST": "host",
    "PORTFOLIO_SITE_DIR": "site_dir",
    "PORTFOLIO_SITE_LOG_LEVEL": "log_level",
    "PORTFOLIO_SITE_ACCESS_LOG": "access_log",
}


def parse_port(value: Any) -> int | None:
    """Return value as a TCP port, or None if it is not one."""
    try:
        port = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    if not 1 <= port <= 65535:
        return None
    return port


def parse_flag(value: Any) -> bool:
    """Parse on/off/true/false value to bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("on", "true", "yes", "1")
    return bool(value)


class ServerConfig:
    """Immutable server configuration.

    Config precedence (later overrides earlier):
    1. Built-in DEFAULTS
    2. Environment variables (PORT, HOST, PORTFOLIO_SITE_DIR,
       PORTFOLIO_SITE_LOG_LEVEL, PORTFOLIO_SITE_ACCESS_LOG)
    3. Explicit constructor parameters (the CLI passes its arguments here)

    None values never override. An unparsable PORT or an unknown log level
    falls back to the default with a warning instead of aborting startup.
    """

    __slots__ = ("_opts",)

    def __init__(
        self,
        site_dir: str | Path | None = None,
        host: str | None = None,
        port: int | None = None,
        log_level: str | None = None,
        debug: bool | None = None,
        access_log: bool | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        caller_opts = SmartOptions(
            dict(
                site_dir=site_dir,
                host=host,
                port=port,
                log_level=log_level,
                debug=debug,
                access_log=access_log,
            ),
            ignore_none=True,
        )
        env_opts = SmartOptions(
            self._read_env(os.environ if env is None else env), ignore_none=True
        )
        opts = SmartOptions(DEFAULTS) + env_opts + caller_opts
        opts["site_dir"] = Path(opts["site_dir"]).expanduser().resolve()
        opts["port"] = int(opts["port"])
        opts["log_level"] = self._check_log_level(opts["log_level"])
        opts["access_log"] = parse_flag(opts["access_log"])
        object.__setattr__(self, "_opts", opts)

    def _check_log_level(self, value: Any) -> str:
        level = str(value).strip().upper()
        if level not in LOG_LEVELS:
            logger.warning(
                f"Ignoring invalid log level {value!r}, using {DEFAULTS['log_level']}"
            )
            return str(DEFAULTS["log_level"])
        return level

    def _read_env(self, env: Mapping[str, str]) -> dict[str, Any]:
        """Extract known options from an environment mapping."""
        result: dict[str, Any] = {}
        for var, name in ENV_VARS.items():
            raw = env.get(var)
            if raw is None or raw == "":
                continue
            if name == "port":
                port = parse_port(raw)
                if port is None:
                    logger.warning(
                        f"Ignoring invalid {var}={raw!r}, using {DEFAULTS['port']}"
                    )
                result[name] = port
            else:
                result[name] = raw
        return result

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    @property
    def host(self) -> str:
        """Bind address."""
        return str(self._opts["host"])

    @property
    def port(self) -> int:
        """Listening TCP port."""
        return int(self._opts["port"])

    @property
    def site_dir(self) -> Path:
        """Directory holding the pages and asset directories."""
        result: Path = self._opts["site_dir"]
        return result

    @property
    def log_level(self) -> str:
        return str(self._opts["log_level"])

    @property
    def debug(self) -> bool:
        """Include tracebacks in 500 responses (development only)."""
        return bool(self._opts["debug"])

    @property
    def access_log(self) -> bool:
        """Log one line per request and response."""
        return bool(self._opts["access_log"])

    def as_dict(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "site_dir": self.site_dir,
            "log_level": self.log_level,
            "debug": self.debug,
            "access_log": self.access_log,
        }

    def __repr__(self) -> str:
        return f"ServerConfig(host={self.host!r}, port={self.port}, site_dir={str(self.site_dir)!r})"


if __name__ == "__main__":
    config = ServerConfig()
    print(f"Server: {config.host}:{config.port}")
    print(f"Site: {config.site_dir}")
