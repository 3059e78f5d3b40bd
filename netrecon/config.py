from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from .errors import ConfigError
from .services import COMMON_SERVICES

DEFAULT_CONCURRENCY = 200
DEFAULT_TIMEOUT_MS = 2000
DEFAULT_PORT_SPEC = "1-1024"
BANNER_LIMIT = 512


@dataclass(frozen=True)
class ScanConfig:
    """
    Read-only settings for one scan run.
    concurrency < 1 is clamped to 1; a non-positive timeout is rejected.
    """

    concurrency: int = DEFAULT_CONCURRENCY
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    services: Mapping[int, str] = field(default_factory=lambda: COMMON_SERVICES, repr=False, compare=False)
    progress_every: int = 1000

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            object.__setattr__(self, "concurrency", 1)
        if self.timeout_ms <= 0:
            raise ConfigError(f"timeout must be a positive number of ms, got {self.timeout_ms}")

    def service_for(self, port: int) -> Optional[str]:
        return self.services.get(port)
