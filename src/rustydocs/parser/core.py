"""Repository walking, reference resolution and JSON snapshots."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from rustydocs.config import IndexerConfig
from rustydocs.exceptions import ParserError, SnapshotError
from rustydocs.parser.models import CodeFile, detect_language
from rustydocs.parser.rust_parser import parse_file

logger = logging.getLogger(__name__)

_CODE_FILES = TypeAdapter(list[CodeFile])


def parse_repository(
    path: str | Path,
    write_to_json_path: str | Path | None = None,
    config: IndexerConfig | None = None,
    progress_callback: callable | None = None,
) -> list[CodeFile]:
    """Parse every Rust file under `path` and resolve cross references.

    Args:
        path: Root directory of the repository.
        write_to_json_path: Optional `.json` file receiving the snapshot.
        config: Indexer configuration for exclusion patterns.
        progress_callback: Optional callback(file_path, current, total) for progress.

    Raises:
        ParserError: If the directory or one of its files cannot be parsed.
        SnapshotError: If the snapshot cannot be written.
    """
    from rustydocs.graph.resolver import resolve_references

    root = Path(path)
    if not root.is_dir():
        raise ParserError(f"Not a directory: {root}")
    if config is None:
        config = IndexerConfig()

    files = _collect_files(root, config)
    code_files = []
    total = len(files)
    for i, file_path in enumerate(files):
        if progress_callback:
            progress_callback(str(file_path), i + 1, total)
        code_files.append(parse_file(file_path, config.test_module_pattern, root))

    resolve_references(code_files)
    logger.info(
        "Parsed %d files, %d elements",
        len(code_files),
        sum(len(f.elements) for f in code_files),
    )

    if write_to_json_path is not None:
        write_snapshot(code_files, write_to_json_path)
    return code_files


def write_snapshot(code_files: list[CodeFile], path: str | Path) -> None:
    """Write the parsed repository as pretty-printed JSON."""
    path = Path(path)
    if path.suffix != ".json":
        raise SnapshotError(f"Snapshot path must end with .json: {path}")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(_CODE_FILES.dump_json(code_files, indent=2))
    except OSError as e:
        raise SnapshotError(f"Cannot write snapshot {path}: {e}") from e


def load_snapshot(path: str | Path) -> list[CodeFile]:
    """Load a snapshot previously written by `write_snapshot`."""
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ParserError(f"Cannot read snapshot {path}: {e}") from e
    try:
        return _CODE_FILES.validate_json(raw)
    except ValidationError as e:
        raise SnapshotError(f"Malformed snapshot {path}: {e}") from e


def load_code_files(path: str | Path, config: IndexerConfig | None = None) -> list[CodeFile]:
    """Load a repository from a `.json` snapshot or a live directory."""
    if Path(path).suffix == ".json":
        return load_snapshot(path)
    return parse_repository(path, config=config)


def collect_files(root: str | Path, config: IndexerConfig | None = None) -> list[Path]:
    """Public API: collect all Rust files in a directory."""
    if config is None:
        config = IndexerConfig()
    return _collect_files(Path(root), config)


def _collect_files(root: Path, config: IndexerConfig) -> list[Path]:
    """Collect all Rust files, respecting exclusion patterns."""
    files = []

    gitignore_patterns = _read_gitignore(root)
    all_exclude = config.exclude_patterns + gitignore_patterns

    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root)

        dirnames[:] = sorted(
            d
            for d in dirnames
            if not _should_exclude(os.path.join(rel_dir, d) if rel_dir != "." else d, all_exclude)
        )

        for filename in filenames:
            rel_path = os.path.join(rel_dir, filename) if rel_dir != "." else filename
            if _should_exclude(rel_path, all_exclude):
                continue
            if detect_language(filename) != "rust":
                continue
            files.append(Path(dirpath) / filename)

    return sorted(files)


def _should_exclude(path: str, patterns: list[str]) -> bool:
    """Check if a path matches any exclusion pattern."""
    path_parts = Path(path).parts
    for pattern in patterns:
        if fnmatch.fnmatch(path, pattern):
            return True
        for part in path_parts:
            if fnmatch.fnmatch(part, pattern):
                return True
    return False


def _read_gitignore(root: Path) -> list[str]:
    """Read .gitignore patterns from the project root."""
    gitignore = root / ".gitignore"
    if not gitignore.exists():
        return []

    patterns = []
    try:
        for line in gitignore.read_text().splitlines():
            line = line.strip()
            if line and not line.startswith("#") and not line.startswith("!"):
                patterns.append(line.strip("/"))
    except OSError as e:
        logger.warning("Cannot read %s: %s", gitignore, e)
    return patterns
