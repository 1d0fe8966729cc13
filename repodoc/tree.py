"""Box-drawing rendering of repository paths."""

from __future__ import annotations

from typing import Dict, Iterable, List

_BRANCH = "├── "
_LAST = "└── "
_PIPE = "│   "
_SPACE = "    "


def render_tree(paths: Iterable[str]) -> str:
    """Render ``/``-separated relative paths as an indented tree.

    Children are sorted at every level. The last sibling uses the terminal
    connector and its subtree is indented without the vertical bar.
    """
    root: Dict[str, dict] = {}
    for path in paths:
        node = root
        for part in path.split("/"):
            if not part:
                continue
            node = node.setdefault(part, {})

    lines: List[str] = []
    _render_node(root, "", lines)
    return "".join(f"{line}\n" for line in lines)


def _render_node(node: Dict[str, dict], prefix: str, lines: List[str]) -> None:
    names = sorted(node)
    for index, name in enumerate(names):
        is_last = index == len(names) - 1
        lines.append(f"{prefix}{_LAST if is_last else _BRANCH}{name}")
        children = node[name]
        if children:
            _render_node(children, prefix + (_SPACE if is_last else _PIPE), lines)


__all__ = ["render_tree"]
