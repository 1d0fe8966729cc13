"""Serialization of a repository context into the XML payload sent to the model."""

from __future__ import annotations

import re
from typing import Iterable

from lxml import etree

from ..logging import get_logger
from ..models import CommitRecord, FileEntry, FileStat, RepositoryContext

logger = get_logger("prompting.context")

# Control characters other than tab, LF and CR, plus DEL.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
# Code points XML 1.0 never allows even after the control strip.
_NON_XML_CHARS = re.compile(r"[\ud800-\udfff\ufffe\uffff]")
_CDATA_END = "]]>"


def sanitize_text(value: str | None) -> str:
    """Strip characters that cannot appear in a well-formed XML document."""
    if not value:
        return ""
    return _CONTROL_CHARS.sub("", value)


def _xml_value(value: str | None) -> str:
    return _NON_XML_CHARS.sub("", sanitize_text(value))


class ContextAssembler:
    """Builds the ``<repository_context>`` document consumed by every strategy."""

    def assemble(
        self,
        project_name: str,
        timestamp: str,
        branch: str,
        directory_tree: str,
        files: Iterable[FileEntry],
        hotspots: Iterable[FileStat] = (),
        commits: Iterable[CommitRecord] = (),
    ) -> str:
        root = etree.Element("repository_context")
        _text_child(root, "project_name", project_name)
        _text_child(root, "analysis_timestamp", timestamp)
        _text_child(root, "branch", branch)
        _text_child(root, "directory_tree", directory_tree)

        corpus = etree.SubElement(root, "source_code_corpus")
        for entry in files:
            self._add_file(corpus, entry)

        hotspots_node = etree.SubElement(root, "hotspots")
        for stat in hotspots:
            node = etree.SubElement(hotspots_node, "file", path=_xml_value(stat.path))
            _text_child(node, "commits", str(stat.commit_count))
            _text_child(node, "lines_added", str(stat.lines_added))
            _text_child(node, "lines_deleted", str(stat.lines_deleted))

        history = etree.SubElement(root, "commit_history")
        for commit in commits:
            self._add_commit(history, commit)

        return etree.tostring(
            root, xml_declaration=True, encoding="UTF-8", pretty_print=True
        ).decode("utf-8")

    def assemble_context(self, context: RepositoryContext) -> str:
        return self.assemble(
            context.project_name,
            context.timestamp,
            context.branch,
            context.directory_tree,
            context.files,
            context.hotspots,
            context.commits,
        )

    @staticmethod
    def _add_file(corpus: etree._Element, entry: FileEntry) -> None:
        try:
            content = sanitize_text(entry.content)
            node = etree.Element("file", path=_xml_value(entry.path))
            # CDATA cannot carry its own terminator; such files fall back to escaped text.
            node.text = content if _CDATA_END in content else etree.CDATA(content)
        except ValueError as exc:
            logger.warning("Failed to add file to context payload: %s (%s)", entry.path, exc)
            return
        corpus.append(node)

    @staticmethod
    def _add_commit(history: etree._Element, commit: CommitRecord) -> None:
        node = etree.SubElement(history, "commit", id=_xml_value(commit.short_id))
        _text_child(node, "author", commit.author_name)
        _text_child(node, "date", commit.author_time)
        _text_child(node, "message", commit.subject)
        etree.SubElement(node, "files_changed", count=str(commit.files_changed))
        etree.SubElement(
            node,
            "stats",
            insertions=str(commit.insertions),
            deletions=str(commit.deletions),
        )


def _text_child(parent: etree._Element, tag: str, text: str) -> etree._Element:
    child = etree.SubElement(parent, tag)
    child.text = _xml_value(text)
    return child


__all__ = ["ContextAssembler", "sanitize_text"]
