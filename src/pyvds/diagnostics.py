"""
This module defines the structured diagnostic events emitted while decoding.
"""
import enum
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple


logger = logging.getLogger(__name__)


class DecodeStage(enum.Enum):
    READING_HEADER = "reading-header"
    READING_PAYLOAD = "reading-payload"
    READING_SIGNATURE = "reading-signature"
    DONE = "done"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single non-fatal observation made by the parser, such as a text field
    that needed a fallback codec or a date that could not be decoded.
    """
    stage: DecodeStage
    event: str
    field: Optional[str] = None
    detail: str = ""

    def as_dict(self) -> dict:
        return {
            "stage": self.stage.value,
            "event": self.event,
            "field": self.field,
            "detail": self.detail,
        }


class DiagnosticLog:
    """
    Collects diagnostics for one decode call and mirrors them to the logger.
    """

    def __init__(self):
        self.stage = DecodeStage.READING_HEADER
        self._events: List[Diagnostic] = []

    def enter(self, stage: DecodeStage) -> None:
        logger.debug("Decode stage: %s -> %s", self.stage.value, stage.value)
        self.stage = stage

    def emit(self, event: str, field: Optional[str] = None, detail: str = "") -> None:
        diagnostic = Diagnostic(self.stage, event, field, detail)
        logger.debug("[%s] %s %s %s", self.stage.value, event, field or "-", detail)
        self._events.append(diagnostic)

    @property
    def events(self) -> Tuple[Diagnostic, ...]:
        return tuple(self._events)

    def __len__(self) -> int:
        return len(self._events)
