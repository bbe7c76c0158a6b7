"""
Runtime settings, read from environment variables.

``WANDERMART_DB_PATH``   SQLite file holding the entity slices.
``WANDERMART_DELAY_MS``  simulated latency applied to every service call.
``WANDERMART_IN_MEMORY`` keep everything in memory instead (nothing survives exit).
``DEBUG``                turn on debug logging.
"""

import os
from dataclasses import dataclass


def _flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    db_path: str = "data/wandermart.sqlite"
    delay_ms: int = 600
    in_memory: bool = False
    debug: bool = False

    @property
    def delay_seconds(self) -> float:
        return max(self.delay_ms, 0) / 1000

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            db_path=os.getenv("WANDERMART_DB_PATH", cls.db_path),
            delay_ms=int(os.getenv("WANDERMART_DELAY_MS", str(cls.delay_ms))),
            in_memory=_flag(os.getenv("WANDERMART_IN_MEMORY", "")),
            debug=_flag(os.getenv("DEBUG", "")),
        )
