"""Shared test doubles — memory backend plus scripted API collaborators."""

from __future__ import annotations

from typing import Any

from kotapay.core.exceptions import KotapayError
from kotapay.persistence.memory_backend import MemoryCacheBackend

__all__ = ["FakeClock", "MemoryCacheBackend", "RecordingSink", "ScriptedApiClient"]


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedApiClient:
    """IApiClient returning (or raising) queued outcomes in order.

    A dict outcome is returned; a KotapayError outcome is raised. Every call is
    recorded as ``(method, path, body, query)``.
    """

    def __init__(self, *outcomes: dict[str, Any] | KotapayError, company_id: str = "CO123") -> None:
        self._outcomes = list(outcomes)
        self._company_id = company_id
        self.calls: list[tuple[str, str, Any, Any]] = []

    @property
    def company_id(self) -> str:
        return self._company_id

    def queue(self, *outcomes: dict[str, Any] | KotapayError) -> None:
        self._outcomes.extend(outcomes)

    def execute(self, method, path, body=None, query=None):
        self.calls.append((method, path, body, query))
        if not self._outcomes:
            raise AssertionError(f"unexpected call {method} {path}")
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, KotapayError):
            raise outcome
        return outcome

    @property
    def paths(self) -> list[str]:
        return [path for _, path, _, _ in self.calls]


class RecordingSink:
    """IEventSink that keeps every emitted record."""

    def __init__(self) -> None:
        self.events: list[Any] = []

    def emit(self, event: Any) -> None:
        self.events.append(event)
