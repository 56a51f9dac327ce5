"""Settings read from the environment."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from brokkr.errors import ConfigError

BACKENDS: tuple[str, ...] = ("python", "llvm")


@dataclass(frozen=True)
class Settings:
    backend: str = "python"
    log_level: int = logging.WARNING
    llvm_opt_level: int = 2

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Settings:
        """Build settings from ``BROKKR_*`` variables.

        Args:
            environ: Mapping to read from, ``os.environ`` when omitted.

        Raises:
            ConfigError: If a variable is set to something unusable.
        """
        environ = os.environ if environ is None else environ

        backend = environ.get("BROKKR_BACKEND", cls.backend).strip().lower()
        if backend not in BACKENDS:
            raise ConfigError(
                f"BROKKR_BACKEND must be one of {BACKENDS}, got {backend!r}"
            )

        level_name = environ.get("BROKKR_LOG_LEVEL", "WARNING").strip().upper()
        log_level = logging.getLevelName(level_name)
        if not isinstance(log_level, int):
            raise ConfigError(f"BROKKR_LOG_LEVEL is not a log level: {level_name!r}")

        raw_opt = environ.get("BROKKR_LLVM_OPT_LEVEL", str(cls.llvm_opt_level))
        try:
            llvm_opt_level = int(raw_opt)
        except ValueError as e:
            raise ConfigError(f"BROKKR_LLVM_OPT_LEVEL is not an integer: {raw_opt!r}") from e
        if not 0 <= llvm_opt_level <= 3:
            raise ConfigError(f"BROKKR_LLVM_OPT_LEVEL must be in 0..3, got {llvm_opt_level}")

        return cls(backend=backend, log_level=log_level, llvm_opt_level=llvm_opt_level)


settings: Settings = Settings.from_env()
