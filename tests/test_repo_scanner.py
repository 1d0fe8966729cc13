"""Tests for repodoc.repo_scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from repodoc.repo_scanner import IgnoreMatcher, RepoCollector, is_text_file, walk_files


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_collect_returns_text_files_only(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _write(repo_root / "a.txt", "hello\n")
    (repo_root / "sub").mkdir()
    (repo_root / "sub" / "b.bin").write_bytes(b"\x00\x01\x02binary")

    entries = RepoCollector().collect_files(repo_root, include_tests=False)

    assert [(entry.path, entry.content) for entry in entries] == [("a.txt", "hello\n")]


def test_collect_preserves_sorted_order(repo_builder) -> None:
    repo_builder.write(
        {
            "src/zeta.py": "z = 1\n",
            "README.md": "# Demo\n",
            "src/alpha.py": "a = 1\n",
            "docs/guide.md": "guide\n",
        }
    )

    paths = [entry.path for entry in repo_builder.collect()]

    assert paths == ["README.md", "docs/guide.md", "src/alpha.py", "src/zeta.py"]


def test_collect_excludes_anything_mentioning_test(repo_builder) -> None:
    repo_builder.write(
        {
            "src/app.py": "print('hi')\n",
            "tests/test_app.py": "def test_ok():\n    pass\n",
            "src/Contest.py": "winner = None\n",
            "fixtures/data.TEST": "x\n",
        }
    )

    without_tests = {entry.path for entry in repo_builder.collect(include_tests=False)}
    with_tests = {entry.path for entry in repo_builder.collect(include_tests=True)}

    assert without_tests == {"src/app.py"}
    assert with_tests == {"src/app.py", "tests/test_app.py", "src/Contest.py", "fixtures/data.TEST"}


def test_collect_respects_gitignore_and_git_dir(repo_builder) -> None:
    repo_builder.write(
        {
            ".gitignore": "build/\n*.log\n!keep.log\n",
            "src/main.py": "print('ok')\n",
            "build/artifact.txt": "generated\n",
            "notes.log": "ignore me\n",
            "keep.log": "keep me\n",
            ".git/config": "[core]\n",
        }
    )

    paths = {entry.path for entry in repo_builder.collect()}

    assert paths == {".gitignore", "src/main.py", "keep.log"}


def test_collect_skips_unreadable_file(repo_builder, monkeypatch) -> None:
    repo_builder.write({"good.py": "ok = True\n", "bad.py": "broken\n"})
    original = Path.read_text

    def flaky_read_text(self: Path, *args, **kwargs):
        if self.name == "bad.py":
            raise PermissionError("denied")
        return original(self, *args, **kwargs)

    monkeypatch.setattr(Path, "read_text", flaky_read_text)

    paths = [entry.path for entry in repo_builder.collect()]

    assert paths == ["good.py"]


def test_collect_skips_non_utf8_text(repo_builder) -> None:
    repo_builder.write({"ok.txt": "fine\n"})
    repo_builder.write_bytes("latin.txt", "caf\xe9 cr\xe8me\n".encode("latin-1"))

    paths = [entry.path for entry in repo_builder.collect()]

    assert paths == ["ok.txt"]


def test_collect_rejects_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        RepoCollector().collect_files(tmp_path / "missing")


def test_ignore_matcher_without_gitignore_only_hides_git_dir(tmp_path: Path) -> None:
    matcher = IgnoreMatcher.build(tmp_path)

    assert matcher(".git", True)
    assert matcher("nested/.git/HEAD", False)
    assert not matcher("src/app.py", False)


def test_ignore_matcher_directory_patterns_need_directories() -> None:
    matcher = IgnoreMatcher(["out/"])

    assert matcher("out", True)
    assert matcher("out/report.txt", False)
    assert not matcher("out", False)


def test_ignore_matcher_later_negation_wins() -> None:
    matcher = IgnoreMatcher(["*.md", "!README.md"])

    assert matcher("CHANGELOG.md", False)
    assert not matcher("README.md", False)


def test_ignore_matcher_fails_open() -> None:
    class ExplodingSpec:
        def match_file(self, path: str) -> bool:
            raise ValueError("bad pattern state")

    matcher = IgnoreMatcher(["*.py"])
    matcher._spec = ExplodingSpec()  # type: ignore[assignment]

    assert matcher.ignores("app.py") is False


def test_walk_files_returns_sorted_absolute_paths(tmp_path: Path) -> None:
    _write(tmp_path / "b" / "c.txt", "c")
    _write(tmp_path / "a.txt", "a")
    _write(tmp_path / ".git" / "HEAD", "ref")

    files = walk_files(tmp_path, IgnoreMatcher.build(tmp_path))

    assert files == [tmp_path / "a.txt", tmp_path / "b" / "c.txt"]
    assert all(path.is_absolute() for path in files)


def test_is_text_file_detects_null_bytes(tmp_path: Path) -> None:
    text = tmp_path / "image.png"
    text.write_text("actually text", encoding="utf-8")
    binary = tmp_path / "data.txt"
    binary.write_bytes(b"abc\x00def")

    assert is_text_file(text) is True
    assert is_text_file(binary) is False


def test_is_text_file_accepts_empty_and_utf8(tmp_path: Path) -> None:
    empty = tmp_path / "empty"
    empty.write_bytes(b"")
    unicode_file = tmp_path / "unicode.md"
    unicode_file.write_text("zażółć gęślą jaźń ✓\n", encoding="utf-8")

    assert is_text_file(empty) is True
    assert is_text_file(unicode_file) is True


def test_is_text_file_falls_back_to_extension_denylist(tmp_path: Path, monkeypatch) -> None:
    def unreadable(self: Path, *args, **kwargs):
        raise OSError("device not ready")

    monkeypatch.setattr(Path, "open", unreadable)

    assert is_text_file(tmp_path / "logo.PNG") is False
    assert is_text_file(tmp_path / "archive.zip") is False
    assert is_text_file(tmp_path / "main.py") is True
    assert is_text_file(tmp_path / "Makefile") is True


def test_collect_writes_snapshot_to_debug_sink(repo_builder) -> None:
    class RecordingSink:
        def __init__(self) -> None:
            self.writes: list[tuple[str, str, str]] = []

        def write(self, name: str, content: str, *, extension: str = "md") -> None:
            self.writes.append((name, content, extension))

    repo_builder.write({"main.py": "x = 1\n"})
    sink = RecordingSink()

    RepoCollector(debug_sink=sink).collect_files(repo_builder.path())

    assert sink.writes[0][0] == "repo_snapshot"
    assert sink.writes[0][2] == "json"
    assert '"main.py"' in sink.writes[0][1]


def test_directory_structure_matches_collected_tree(repo_builder) -> None:
    repo_builder.write(
        {
            ".gitignore": "dist/\n",
            "src/app.py": "",
            "src/lib/util.py": "",
            "dist/bundle.js": "",
            "README.md": "",
        }
    )

    tree = repo_builder.tree()

    assert tree == (
        "├── .gitignore\n"
        "├── README.md\n"
        "└── src\n"
        "    ├── app.py\n"
        "    └── lib\n"
        "        └── util.py\n"
    )


def test_symlinked_directories_are_not_followed(repo_builder, tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    _write(outside / "secret.py", "token = 'x'\n")
    repo_builder.write({"src/app.py": "print('hi')\n"})
    root = repo_builder.path()
    try:
        (root / "vendor").symlink_to(outside, target_is_directory=True)
        (root / "alias.py").symlink_to(root / "src" / "app.py")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks are not supported here")

    paths = [entry.path for entry in repo_builder.collect()]

    assert paths == ["alias.py", "src/app.py"]
    assert "vendor" not in repo_builder.tree()
