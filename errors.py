# errors.py
from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    STRUCTURAL = "structural"
    CONFIGURATION = "configuration"
    STATE = "state"
    MESSAGE = "message"
    PERSISTENCE = "persistence"


class Reason(Enum):
    """Why a configuration or message was rejected."""

    MISSING_FIELD = "missing-field"
    ROTOR_COUNT = "rotor-count"
    POSITION_COUNT = "position-count"
    DUPLICATE_ROTOR = "duplicate-rotor"
    UNKNOWN_ROTOR = "unknown-rotor"
    UNKNOWN_REFLECTOR = "unknown-reflector"
    POSITION_NOT_IN_ALPHABET = "position-not-in-alphabet"
    PLUGBOARD_ODD_LENGTH = "plugboard-odd-length"
    PLUGBOARD_SELF_PAIR = "plugboard-self-pair"
    PLUGBOARD_REPEAT = "plugboard-repeat"
    PLUGBOARD_NOT_IN_ALPHABET = "plugboard-not-in-alphabet"
    NOT_IN_ALPHABET = "not-in-alphabet"
    INDEX_OUT_OF_RANGE = "index-out-of-range"
    FORBIDDEN_CONTROL = "forbidden-control"

    @property
    def kind(self) -> ErrorKind:
        if self in _MESSAGE_REASONS:
            return ErrorKind.MESSAGE
        return ErrorKind.CONFIGURATION


_MESSAGE_REASONS = frozenset(
    {Reason.NOT_IN_ALPHABET, Reason.INDEX_OUT_OF_RANGE, Reason.FORBIDDEN_CONTROL}
)


class EngineError(Exception):
    """Base class for every failure the engine reports to its caller."""

    kind: ErrorKind = ErrorKind.STATE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# ── loader boundary ──────────────────────────────────────────────
class StructuralError(EngineError, ValueError):
    """The machine description itself is invalid."""

    kind = ErrorKind.STRUCTURAL


# ── configuration & state ────────────────────────────────────────
class ConfigurationError(EngineError, ValueError):
    kind = ErrorKind.CONFIGURATION


class StateError(EngineError, RuntimeError):
    """Operation attempted before the machine is loaded or configured."""

    kind = ErrorKind.STATE


# ── messages ─────────────────────────────────────────────────────
class MessageError(EngineError, ValueError):
    kind = ErrorKind.MESSAGE

    def __init__(
        self,
        message: str,
        *,
        reason: Reason | None = None,
        position: int | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.position = position


class AlphabetViolation(MessageError):
    """A symbol or index falls outside the machine alphabet."""


# ── snapshot files ───────────────────────────────────────────────
class PersistenceError(EngineError):
    kind = ErrorKind.PERSISTENCE


__all__ = [
    "AlphabetViolation",
    "ConfigurationError",
    "EngineError",
    "ErrorKind",
    "MessageError",
    "PersistenceError",
    "Reason",
    "StateError",
    "StructuralError",
]
