# PixelChain - Diagnostics
"""
Diagnostics sinks receive the non-fatal warnings filters emit when they skip
their effect. The core never decides how a diagnostic is displayed or stored,
it only hands it to the sink it was given.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    """A single non-fatal warning."""

    message: str
    "Human readable reason"
    source: str = ""
    "Name of the emitting filter or component"
    payload: Any = None
    "Optional structured data"


@runtime_checkable
class DiagnosticsSink(Protocol):
    """Anything which accepts diagnostics."""

    def emit(self, diagnostic: Diagnostic) -> None:
        ...


class LoggingDiagnostics:
    """Forwards diagnostics to a :mod:`logging` logger at WARNING level."""

    def __init__(self, target: logging.Logger | None = None, level: int = logging.WARNING):
        self.logger = target or logger
        self.level = level

    def emit(self, diagnostic: Diagnostic) -> None:
        self.logger.log(
            self.level,
            "%s: %s",
            diagnostic.source or "pixelchain",
            diagnostic.message,
            extra={"pixelchain_source": diagnostic.source,
                   "pixelchain_payload": diagnostic.payload},
        )


@dataclass
class CollectingDiagnostics:
    """Keeps all diagnostics in memory, e.g. to inspect skipped effects."""

    diagnostics: list[Diagnostic] = field(default_factory=list)

    def emit(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    @property
    def messages(self) -> list[str]:
        return [d.message for d in self.diagnostics]

    def clear(self):
        self.diagnostics.clear()

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self):
        return iter(self.diagnostics)


__all__ = ["Diagnostic", "DiagnosticsSink", "LoggingDiagnostics", "CollectingDiagnostics"]
