"""Tool-facing entry point: run the pipeline and report results in-band."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from jinja2 import Environment

from .failsafe import is_error_document
from .logging import get_logger
from .orchestrator import AnalysisRequest, Orchestrator
from .output import resolve_output_directory, write_documents

logger = get_logger("tool")

DEFAULT_TARGET_LANGUAGE = "English"

_RECOMMENDATION = (
    "RECOMMENDATION: The following documentation MD files are generated for your project. "
    "Be aware that it will overwrite existing files. It is suggested to save them in a `docs/` "
    "directory at the root of your project, or another location if preferred."
)

_env = Environment(autoescape=False, keep_trailing_newline=False)

_WRITTEN_TEMPLATE = _env.from_string(
    "DOCUMENTATION GENERATED.\n\nFiles have been successfully written to: {{ output_path }}"
)

_INLINE_TEMPLATE = _env.from_string(
    "{{ intro }}"
    "{% for label, text in documents.items() %}"
    "\n\n---\n\n## {{ label }}\n\n{{ text }}"
    "{% endfor %}"
)


@dataclass
class ToolResult:
    """Outcome of a tool invocation; failures are flagged, never raised."""

    text: str
    is_error: bool = False
    documents: Dict[str, str] = field(default_factory=dict)
    output_path: Optional[Path] = None


async def generate_documentation(
    orchestrator: Orchestrator,
    project_path: str,
    *,
    include_tests: bool = False,
    target_language: Optional[str] = DEFAULT_TARGET_LANGUAGE,
    output_dir: Optional[str] = None,
) -> ToolResult:
    """Analyze ``project_path`` and optionally write one markdown file per document."""
    try:
        result = await orchestrator.analyze(
            AnalysisRequest(
                project_path=project_path,
                include_tests=include_tests,
                target_language=target_language,
            )
        )
        failed = sorted(label for label, text in result.documents.items() if is_error_document(text))
        if failed:
            logger.warning("Some documents could not be generated: %s", ", ".join(failed))
        output_path = None
        if output_dir:
            output_path = resolve_output_directory(output_dir, project_path)
            write_documents(output_path, result.documents)
            logger.info("Wrote %d documents to %s", len(result.documents), output_path)
    except Exception as exc:
        logger.error("Documentation run failed for %s: %s", project_path, exc)
        return ToolResult(text=f"Error analyzing repository: {exc}", is_error=True)

    if output_path is not None:
        text = _WRITTEN_TEMPLATE.render(output_path=output_path)
    else:
        text = _INLINE_TEMPLATE.render(intro=_RECOMMENDATION, documents=result.documents)
    return ToolResult(text=text, documents=result.documents, output_path=output_path)


__all__ = ["DEFAULT_TARGET_LANGUAGE", "ToolResult", "generate_documentation"]
