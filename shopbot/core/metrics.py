"""Lightweight in-memory metrics collector."""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass
from typing import Dict


@dataclass
class MetricSnapshot:
    total_turns: int
    statuses: Dict[str, int]
    next_slots: Dict[str, int]
    sessions_started: int


class MetricsCollector:
    """Thread-safe counter storage for service-wide conversation metrics."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total_turns = 0
        self._sessions_started = 0
        self._statuses: Counter[str] = Counter()
        self._next_slots: Counter[str] = Counter()

    def record_session_started(self) -> None:
        with self._lock:
            self._sessions_started += 1

    def record_turn(self, status: str, next_slot: str | None = None) -> None:
        with self._lock:
            self._total_turns += 1
            self._statuses[status] += 1
            if next_slot:
                self._next_slots[next_slot] += 1

    def snapshot(self) -> MetricSnapshot:
        with self._lock:
            return MetricSnapshot(
                total_turns=self._total_turns,
                statuses=dict(self._statuses),
                next_slots=dict(self._next_slots),
                sessions_started=self._sessions_started,
            )
