"""Document-generation strategies and the executor that runs them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple, Union

from .failsafe import build_error_document
from .llm.base import GenerationClient
from .logging import get_logger
from .models import CacheHandle
from .prompting.templates import PromptLibrary

logger = get_logger("strategies")


@dataclass(frozen=True)
class DocumentStrategy:
    """One prompt/template pairing producing a single labelled document."""

    label: str
    prompt_template: str
    doc_template: str


@dataclass(frozen=True)
class EvaluationStrategy:
    """Judges previously generated documents; carries them as its payload."""

    label: str
    prompt_template: str
    doc_template: str
    documents: Mapping[str, str]


Strategy = Union[DocumentStrategy, EvaluationStrategy]


DEFAULT_STRATEGIES: Tuple[DocumentStrategy, ...] = (
    DocumentStrategy("README", "readme-prompt-template.md", "readme-documentation-template.md"),
    DocumentStrategy(
        "AI Context", "ai-context-prompt-template.md", "ai-context-documentation-template.md"
    ),
    DocumentStrategy(
        "DDD Refactoring", "ddd-refactoring-prompt-template.md", "ddd-refactoring-template.md"
    ),
    DocumentStrategy(
        "Dictionary", "dictionary-prompt-template.md", "dictionary-documentation-template.md"
    ),
    DocumentStrategy(
        "Quality Assessment",
        "quality-assessment-prompt-template.md",
        "quality-assessment-documentation-template.md",
    ),
    DocumentStrategy(
        "Refactoring", "refactoring-prompt-template.md", "refactoring-documentation-template.md"
    ),
)

EVALUATION_LABEL = "Evaluation"
EVALUATION_PROMPT_TEMPLATE = "judge-validation-template.md"
EVALUATION_DOC_TEMPLATE = "judge-documentation-template.md"


def evaluation_strategy(documents: Mapping[str, str]) -> EvaluationStrategy:
    return EvaluationStrategy(
        EVALUATION_LABEL,
        EVALUATION_PROMPT_TEMPLATE,
        EVALUATION_DOC_TEMPLATE,
        documents=dict(documents),
    )


def render_documents_payload(documents: Mapping[str, str]) -> str:
    """Wrap each generated document for the evaluation prompt."""
    return "\n\n".join(
        f'<document name="{label}">\n{content}\n</document>' for label, content in documents.items()
    )


async def run_strategy(
    strategy: Strategy,
    *,
    prompts: PromptLibrary,
    client: GenerationClient,
    cache: Optional[CacheHandle],
    target_language: Optional[str] = None,
) -> Tuple[str, str]:
    """Execute one strategy and return ``(label, content)``.

    Failures never propagate: the content becomes an ``Error generating ...``
    placeholder so sibling strategies and the caller are unaffected.
    """
    generated: Optional[str] = None
    if isinstance(strategy, EvaluationStrategy):
        generated = render_documents_payload(strategy.documents)

    try:
        prompt = prompts.build_prompt(
            strategy.prompt_template,
            strategy.doc_template,
            target_language=target_language,
            cache_name=cache.name if cache is not None else None,
            generated_documents=generated,
        )
        content = await client.generate_content(prompt, cache)
    except Exception as exc:
        logger.error("Failed %s: %s", strategy.label, exc)
        return strategy.label, build_error_document(strategy.label, exc)
    return strategy.label, content


__all__ = [
    "DEFAULT_STRATEGIES",
    "DocumentStrategy",
    "EVALUATION_LABEL",
    "EvaluationStrategy",
    "Strategy",
    "evaluation_strategy",
    "render_documents_payload",
    "run_strategy",
]
