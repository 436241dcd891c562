"""Domain-specific exceptions raised by the symbol extraction engine."""

from __future__ import annotations


class ExtractionError(RuntimeError):
    """Base error for structural failures while scanning a single source."""

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        super().__init__(message)
        self.offset = offset


class UnterminatedBodyError(ExtractionError):
    """Raised when a braced body reaches end-of-input before it closes."""


class StructuralDelimiterNotFoundError(ExtractionError):
    """Raised when a declaration's opening brace cannot be located."""


class SymbolNotFoundError(LookupError):
    """Raised when a symbol map lookup targets an absent name."""


__all__ = [
    "ExtractionError",
    "UnterminatedBodyError",
    "StructuralDelimiterNotFoundError",
    "SymbolNotFoundError",
]
