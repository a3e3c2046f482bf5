import logging
import os
from dataclasses import dataclass

from .exceptions import ConfigError

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _parse_level(value: str) -> int:
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ConfigError(f"Unknown log level: {value!r}")
    return level


@dataclass
class GradingConfig:
    log_level: int = logging.WARNING
    log_format: str = DEFAULT_LOG_FORMAT
    limit: int | None = None
    output_file: str | None = None
    check_drift: bool = False

    @classmethod
    def from_env(cls) -> "GradingConfig":
        config = cls()
        if level := os.getenv("GRADING_LOG_LEVEL"):
            config.log_level = _parse_level(level)
        if output := os.getenv("GRADING_OUTPUT"):
            config.output_file = output
        return config

    def with_log_level(self, value: str | None) -> "GradingConfig":
        if value:
            self.log_level = _parse_level(value)
        return self

    def configure_logging(self):
        logging.basicConfig(level=self.log_level, format=self.log_format)
