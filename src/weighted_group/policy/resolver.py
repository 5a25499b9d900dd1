"""Registry policy — runtime settings loaded from the config directory.

The config directory holds ``registry_policy.json``. Every key is
optional; missing keys fall back to the defaults below and a missing
file yields a default policy.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from weighted_group.models.member import MAX_WEIGHT


POLICY_FILENAME = "registry_policy.json"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class RegistryPolicy:
    """Settings shared by the service, the CLI and the invariant tool.

    max_total_weight: Ceiling for the aggregate weight (u64 by default).
    state_file: Snapshot file name inside the data directory.
    event_log_file: JSONL event log file name inside the data directory.
    log_level: Standard logging level name.
    """
    max_total_weight: int = MAX_WEIGHT
    state_file: str = "state.json"
    event_log_file: str = "events.jsonl"
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if isinstance(self.max_total_weight, bool) or not isinstance(
            self.max_total_weight, int
        ):
            raise ValueError("max_total_weight must be an integer")
        if not 0 < self.max_total_weight <= MAX_WEIGHT:
            raise ValueError(
                f"max_total_weight must be in (0, {MAX_WEIGHT}], "
                f"got {self.max_total_weight}"
            )
        if not self.state_file or not self.event_log_file:
            raise ValueError("state_file and event_log_file cannot be empty")
        if self.state_file == self.event_log_file:
            raise ValueError("state_file and event_log_file must differ")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Unknown log_level: {self.log_level}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RegistryPolicy:
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown policy keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> RegistryPolicy:
        path = config_dir / POLICY_FILENAME
        if not path.exists():
            return cls()
        with path.open("r", encoding="utf-8") as handle:
            return cls.from_dict(json.load(handle))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level.upper())
