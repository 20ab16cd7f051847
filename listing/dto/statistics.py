"""EntityStatistics DTO: aggregate counters shown above a list."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

Number = Union[int, float]


@dataclass(frozen=True)
class EntityStatistics:
    """Counters keyed by the server's statistic names (e.g. ``totalAcquisitions``)."""

    values: Mapping[str, Number] = field(default_factory=dict)

    def get(self, key: str, default: Number = 0) -> Number:
        return self.values.get(key, default)

    def __getitem__(self, key: str) -> Number:
        return self.values[key]

    def __len__(self) -> int:
        return len(self.values)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "EntityStatistics":
        """Keep numeric counters only; nested or textual values are ignored."""
        values = {
            str(k): v for k, v in (payload or {}).items()
            if isinstance(v, (int, float)) and not isinstance(v, bool)
        }
        return cls(values=values)
