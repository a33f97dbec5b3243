from __future__ import annotations

import math
from dataclasses import dataclass

from app.domain.entities.slot import SlotKey


@dataclass(frozen=True)
class Hold:
    id: str
    slot: SlotKey
    created_at: float  # unix timestamp
    ttl_seconds: int

    @property
    def expires_at(self) -> float:
        return self.created_at + self.ttl_seconds

    def is_expired(self, now: float) -> bool:
        return now - self.created_at > self.ttl_seconds

    def remaining_seconds(self, now: float) -> int:
        return max(0, math.ceil(self.expires_at - now))
