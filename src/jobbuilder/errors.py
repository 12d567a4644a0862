# errors.py
from __future__ import annotations

from enum import Enum
from typing import Optional


class JobBuilderError(Exception):
    """Base class for errors raised by jobbuilder."""
    pass


class DecodePhase(str, Enum):
    ENVELOPE_MALFORMED = "envelope_malformed"
    SPEC_MARKUP_INVALID = "spec_markup_invalid"
    SPEC_SHAPE_MISMATCH = "spec_shape_mismatch"


class DecodeError(JobBuilderError):
    """
    Raised when a build request cannot be decoded.

    Always caused by the client. `phase` says which stage rejected the
    request and `path` names the offending field, when there is one.
    """

    def __init__(self, phase: DecodePhase, message: str, path: Optional[str] = None):
        self.phase = phase
        self.message = message
        self.path = path
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.path:
            return f"{self.phase.value}: {self.path}: {self.message}"
        return f"{self.phase.value}: {self.message}"


class RegistrationError(JobBuilderError):
    """Raised when the scheduler does not accept a job."""
    pass


class ConfigError(JobBuilderError):
    """Raised when settings are missing or malformed."""
    pass
