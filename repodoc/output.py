"""Writing generated documents to disk."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Mapping

_WHITESPACE = re.compile(r"\s+")


def resolve_output_directory(output_dir: str | Path, project_path: str | Path | None = None) -> Path:
    """Resolve relative output directories against the project, else the working directory."""
    target = Path(output_dir).expanduser()
    if target.is_absolute():
        return target
    base = Path(project_path).expanduser() if project_path else Path.cwd()
    return (base / target).resolve()


def document_filename(label: str) -> str:
    """``"Quality Assessment"`` -> ``"quality-assessment.md"``."""
    return f"{_WHITESPACE.sub('-', label.lower())}.md"


def write_documents(target_dir: Path, documents: Mapping[str, str]) -> List[Path]:
    target_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    for label, content in documents.items():
        path = target_dir / document_filename(label)
        path.write_text(content, encoding="utf-8")
        written.append(path)
    return written


__all__ = ["document_filename", "resolve_output_directory", "write_documents"]
