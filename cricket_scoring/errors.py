"""
cricket_scoring/errors.py
=========================

Error kinds raised by the scoring engine.

Every error is raised by the operation that detects it and is never corrected
inside the engine.  Callers decide whether to skip a malformed match, abort a
batch, or rebuild the offending event from other data.
"""


class ScoringError(Exception):
    """Base class for every error the engine raises."""


class ValidationError(ScoringError):
    """A delivery (or a value derived from one) is internally inconsistent."""

    def __init__(self, message, delivery=None):
        super().__init__(message)
        self.delivery = delivery


class InningsClosedError(ScoringError):
    """A transition was attempted on an innings that is already closed."""

    def __init__(self, message, closure=None):
        super().__init__(message)
        self.closure = closure


class SequenceError(ScoringError):
    """An innings was started (or play changed) out of the allowed order."""


class UnresolvableOutcomeError(ScoringError):
    """The resolver was asked for a result the game cannot yet support."""
