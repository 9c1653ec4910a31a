"""
Holiday Card Kernel — Exceptions

Raised at the boundaries where untrusted data or IO enters the kernel
(import, load-by-id, share-link decode, save). The model and renderer
never raise these; they return results or degrade silently.
"""

from __future__ import annotations


class CardError(Exception):
    """Base class for card errors surfaced to the user."""

    pass


class StructuralValidationError(CardError):
    """Imported or loaded config is malformed (missing intro, sections not a list)."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or [message]


class ResourceTooLarge(CardError):
    """Payload exceeds a transport or storage ceiling."""

    def __init__(self, message: str, size_bytes: int | None = None, limit_bytes: int | None = None) -> None:
        super().__init__(message)
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes

    @property
    def size_mb(self) -> float | None:
        if self.size_bytes is None:
            return None
        return self.size_bytes / (1024 * 1024)


class TransientIOFailure(CardError):
    """Network or file IO failed. The user may retry by re-issuing the action."""

    pass


class CardNotFound(CardError):
    """No stored card under the given id (never saved, or expired)."""

    pass


class OperationInProgress(CardError):
    """The same single-shot operation is already running."""

    pass
