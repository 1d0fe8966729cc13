"""Prompt template loading and placeholder substitution."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from ..debug import DebugSink, NullDebugSink
from ..logging import get_logger
from .constants import (
    CACHED_CONTEXT_NOTICE,
    CONTEXT_PLACEHOLDER,
    DOCUMENTATION_TEMPLATE_PLACEHOLDER,
    GENERATED_DOCUMENTATION_PLACEHOLDER,
    LANGUAGE_INSTRUCTION_PLACEHOLDER,
)

logger = get_logger("prompting.templates")

DEFAULT_TEMPLATES_DIR = Path(__file__).with_name("templates")


class PromptTemplateError(RuntimeError):
    """Raised when a prompt or documentation template cannot be loaded."""


class PromptLibrary:
    """Loads markdown templates from a directory and fills their placeholders."""

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        debug_sink: DebugSink | None = None,
    ) -> None:
        self.templates_dir = templates_dir or DEFAULT_TEMPLATES_DIR
        # Templates use literal $TOKEN$ placeholders; Jinja is only the lookup layer.
        self._env = Environment(loader=FileSystemLoader(str(self.templates_dir)), autoescape=False)
        self._debug = debug_sink or NullDebugSink()

    def load(self, name: str) -> str:
        try:
            source, _, _ = self._env.loader.get_source(self._env, name)  # type: ignore[union-attr]
        except TemplateNotFound as exc:
            raise PromptTemplateError(
                f"Template not found: {self.templates_dir / name}"
            ) from exc
        return source

    @staticmethod
    def substitute(template: str, values: Mapping[str, str]) -> str:
        """Replace the first occurrence of each placeholder token."""
        result = template
        for token, value in values.items():
            result = result.replace(token, value, 1)
        return result

    def build_prompt(
        self,
        prompt_template: str,
        documentation_template: str,
        *,
        target_language: str | None = None,
        cache_name: str | None = None,
        generated_documents: str | None = None,
    ) -> str:
        """Assemble the final prompt text for one strategy."""
        prompt = self.load(prompt_template)
        documentation = self.load(documentation_template)

        values = {}
        if cache_name:
            values[CONTEXT_PLACEHOLDER] = CACHED_CONTEXT_NOTICE
        else:
            # Without a cache handle the context placeholder stays in the prompt.
            logger.error("No cached context available for %s; context placeholder left as-is", prompt_template)
        values[DOCUMENTATION_TEMPLATE_PLACEHOLDER] = documentation
        values[LANGUAGE_INSTRUCTION_PLACEHOLDER] = language_instruction(target_language)
        values[GENERATED_DOCUMENTATION_PLACEHOLDER] = generated_documents or ""

        rendered = self.substitute(prompt, values)
        self._debug.write(f"prepared_prompt_{Path(prompt_template).stem}", rendered)
        return rendered


def language_instruction(target_language: str | None) -> str:
    if not target_language:
        return ""
    return f"- IMPORTANT: Response MUST be in {target_language} language"


__all__ = ["PromptLibrary", "PromptTemplateError", "language_instruction"]
