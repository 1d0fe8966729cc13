"""Placeholder documents used when a generation step fails."""

from __future__ import annotations

ERROR_PREFIX = "Error generating"


def build_error_document(label: str, reason: object) -> str:
    """Return the inline placeholder recorded in place of a failed document."""
    message = " ".join(str(reason).split()) or reason.__class__.__name__
    return f"{ERROR_PREFIX} {label}: {message}"


def is_error_document(content: str) -> bool:
    return content.startswith(ERROR_PREFIX)


__all__ = ["ERROR_PREFIX", "build_error_document", "is_error_document"]
