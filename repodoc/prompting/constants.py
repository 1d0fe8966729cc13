"""Placeholder tokens shared by prompt templates and the prompt builder."""

from __future__ import annotations

CONTEXT_PLACEHOLDER = "$REPOSITORY_CONTEXT_PAYLOAD_PLACEHOLDER$"
DOCUMENTATION_TEMPLATE_PLACEHOLDER = "$DOCUMENTATION_TEMPLATE$"
LANGUAGE_INSTRUCTION_PLACEHOLDER = "$LANGUAGE_INSTRUCTION$"
GENERATED_DOCUMENTATION_PLACEHOLDER = "$GENERATED_DOCUMENTATION_PLACEHOLDER$"

CACHED_CONTEXT_NOTICE = "(served from cache)"


__all__ = [
    "CACHED_CONTEXT_NOTICE",
    "CONTEXT_PLACEHOLDER",
    "DOCUMENTATION_TEMPLATE_PLACEHOLDER",
    "GENERATED_DOCUMENTATION_PLACEHOLDER",
    "LANGUAGE_INSTRUCTION_PLACEHOLDER",
]
