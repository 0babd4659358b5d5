"""
Search settings.

Settings are immutable once built and shared read-only by the coordinator and
all workers. They can be loaded from the [genkeys] section of config.ini:

    [genkeys]
    threads = 8
    timeout = 3600
    verbose = false
    ipv6_nice = true
    target_zeros = 32
"""

import configparser
import logging
from dataclasses import dataclass, replace

import psutil

from .errors import SettingsError

logger = logging.getLogger(__name__)

CONFIG_SECTION = "genkeys"
MAX_TARGET_ZEROS = 256


def hardware_workers() -> int:
    """Number of logical CPUs, at least 1."""
    return psutil.cpu_count(logical=True) or 1


@dataclass(frozen=True)
class Settings:
    """Configuration for a key search."""
    workers: int = 0  # 0 = one worker per logical CPU
    max_duration: int = 0  # seconds, 0 = unlimited
    verbose: bool = False
    ipv6_nice: bool = False  # rank by address zero blocks instead of key zero bits
    target_leading_zeros: int = 0  # stop once reached, 0 = unlimited

    def __post_init__(self):
        if self.workers < 0:
            raise SettingsError(f"workers must be >= 0, got {self.workers}")
        if self.max_duration < 0:
            raise SettingsError(f"max_duration must be >= 0, got {self.max_duration}")
        if not 0 <= self.target_leading_zeros <= MAX_TARGET_ZEROS:
            raise SettingsError(
                f"target_leading_zeros must be between 0 and {MAX_TARGET_ZEROS}, "
                f"got {self.target_leading_zeros}"
            )

    @property
    def worker_count(self) -> int:
        return self.workers or hardware_workers()

    def with_overrides(self, **overrides) -> 'Settings':
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)

    @classmethod
    def from_config(cls, config: configparser.ConfigParser, section: str = CONFIG_SECTION) -> 'Settings':
        """Build settings from a config section, falling back to defaults."""
        if not config.has_section(section):
            logger.debug(f"No [{section}] section in config, using defaults")
            return cls()

        try:
            return cls(
                workers=config.getint(section, "threads", fallback=0),
                max_duration=config.getint(section, "timeout", fallback=0),
                verbose=config.getboolean(section, "verbose", fallback=False),
                ipv6_nice=config.getboolean(section, "ipv6_nice", fallback=False),
                target_leading_zeros=config.getint(section, "target_zeros", fallback=0),
            )
        except ValueError as e:
            if isinstance(e, SettingsError):
                raise
            raise SettingsError(f"Invalid value in [{section}]: {e}") from e
