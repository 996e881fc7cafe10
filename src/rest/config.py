"""
REST Gateway Configuration
Persistent settings for the Thread REST gateway
"""

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional
import logging

from utils.paths import ThreadRestPaths

from .diagnostics import DIAG_COLLECT_TIMEOUT, DIAG_RESET_TIMEOUT

logger = logging.getLogger(__name__)

ENV_HOST = 'THREADREST_HOST'
ENV_PORT = 'THREADREST_PORT'
ENV_LOG_LEVEL = 'THREADREST_LOG_LEVEL'


@dataclass
class RestConfig:
    """Complete gateway configuration"""
    # SECURITY: localhost only unless --host is given explicitly
    host: str = "127.0.0.1"
    port: int = 8081

    # Diagnostics timing (seconds)
    collect_timeout: float = DIAG_COLLECT_TIMEOUT
    diag_reset_timeout: float = DIAG_RESET_TIMEOUT

    # Event loop
    tick_interval: float = 0.05  # seconds between ticks while a request waits
    request_timeout: float = 10.0  # 408 after this long

    # Mesh backend
    simulate: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: str = ""  # Empty = console only

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the configuration file path"""
        config_dir = ThreadRestPaths.get_config_dir()
        config_dir.mkdir(parents=True, exist_ok=True)
        return ThreadRestPaths.get_config_file()

    @classmethod
    def from_dict(cls, data: dict) -> 'RestConfig':
        """Build from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> 'RestConfig':
        """Load configuration from file, then apply environment overrides"""
        config_path = Path(path) if path else cls.get_config_path()

        if not config_path.exists():
            logger.info(f"No REST config found at {config_path}, using defaults")
            config = cls()
        else:
            try:
                with open(config_path, 'r') as f:
                    config = cls.from_dict(json.load(f))
                config.validate()
                logger.info(f"Loaded REST config from {config_path}")
            except Exception as e:
                logger.error(f"Failed to load REST config: {e}")
                config = cls()

        config.apply_env()
        return config

    def save(self, path: Optional[Path] = None) -> bool:
        """Save configuration to file"""
        config_path = Path(path) if path else self.get_config_path()

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)

            logger.info(f"Saved REST config to {config_path}")
            return True

        except Exception as e:
            logger.error(f"Failed to save REST config: {e}")
            return False

    def apply_env(self) -> None:
        """Override host, port and log level from THREADREST_* variables"""
        host = os.environ.get(ENV_HOST)
        if host:
            self.host = host

        port = os.environ.get(ENV_PORT)
        if port:
            try:
                self.port = int(port)
            except ValueError:
                logger.warning(f"Ignoring invalid {ENV_PORT}={port!r}")

        log_level = os.environ.get(ENV_LOG_LEVEL)
        if log_level:
            self.log_level = log_level.upper()

    def validate(self) -> None:
        """Raise ValueError on settings the gateway cannot run with"""
        if not 0 < int(self.port) < 65536:
            raise ValueError(f"port out of range: {self.port}")
        for name in ('collect_timeout', 'diag_reset_timeout', 'tick_interval', 'request_timeout'):
            if float(getattr(self, name)) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.collect_timeout >= self.request_timeout:
            raise ValueError("request_timeout must exceed collect_timeout")
