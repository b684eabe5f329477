"""Command-line interface for rustydocs."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
import time
from pathlib import Path

import click
from rich.logging import RichHandler

from rustydocs import __version__
from rustydocs.config import (
    ProjectConfig,
    find_project_root,
    lancedb_uri,
    load_config,
    save_config,
    set_config_value,
)
from rustydocs.exceptions import RustyDocsError
from rustydocs.ui.console import Console

console = Console()


def _get_project_root(path: str | None = None) -> Path:
    """Find the project root, falling back to the current directory."""
    if path:
        root = Path(path).resolve()
        if not root.exists():
            console.error(f"Path does not exist: {path}")
            sys.exit(1)
        return root
    return find_project_root() or Path.cwd()


def _fail(error: Exception) -> None:
    console.error(str(error))
    sys.exit(1)


def _create_store(root: Path, config: ProjectConfig):
    from rustydocs.store.lance import LanceVectorStore

    return LanceVectorStore(
        lancedb_uri(root, config),
        table_name=config.vector_store.table_name,
        vector_size=config.vector_store.vector_size,
    )


def _load_files(repo: str, config: ProjectConfig):
    from rustydocs.parser.core import load_code_files

    return load_code_files(repo, config.indexer)


@click.group()
@click.version_option(version=__version__, prog_name="rustydocs")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs.")
def main(verbose: bool):
    """rustydocs - index a Rust repository, document it and ask it questions."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console.console, show_path=False)],
    )


@main.command()
@click.argument("repo", type=click.Path(exists=True, file_okay=False))
@click.option("--output", "-o", default=None, help="Write the parsed repository to this .json file.")
@click.option("--path", "-p", default=None, help="Path to the project root.")
def parse(repo: str, output: str | None, path: str | None):
    """Parse a Rust repository and resolve its cross references."""
    from rustydocs.graph.builder import GraphBuilder
    from rustydocs.parser.core import parse_repository

    config = load_config(_get_project_root(path))
    start_time = time.time()

    try:
        with console.indexing_progress() as progress:
            task = progress.add_task("Parsing...", total=None)

            def on_progress(file_path: str, current: int, total: int):
                progress.update(
                    task, total=total, completed=current,
                    description=f"Parsing {file_path}",
                )

            code_files = parse_repository(repo, output, config.indexer, on_progress)
    except RustyDocsError as e:
        _fail(e)

    elapsed = time.time() - start_time
    builder = GraphBuilder()
    builder.build_from_files(code_files)
    stats = builder.get_stats()

    console.success(f"Parsed {stats['files']} files in {elapsed:.1f}s")
    console.show_stats(stats)
    if output:
        console.success(f"Snapshot written to {output}")


@main.command()
@click.argument("repo", type=click.Path(exists=True))
@click.option("--max-concurrent", "-c", default=None, type=int,
              help="Max elements embedded at once (default from config).")
@click.option("--sequential", is_flag=True, help="Embed elements one at a time.")
@click.option("--path", "-p", default=None, help="Path to the project root.")
def embed(repo: str, max_concurrent: int | None, sequential: bool, path: str | None):
    """Embed every element of a repository (or a .json snapshot) into the vector store."""
    from rustydocs.llm.factory import create_provider
    from rustydocs.store.embedding import embed_repository

    root = _get_project_root(path)
    config = load_config(root)
    if sequential:
        max_concurrent = None
    elif max_concurrent is None:
        max_concurrent = config.vector_store.max_concurrent_tasks

    try:
        code_files = _load_files(repo, config)
        llm = create_provider(config.llm)
        store = _create_store(root, config)
        count = asyncio.run(embed_repository(code_files, store, llm, max_concurrent))
    except (RustyDocsError, ValueError) as e:
        _fail(e)

    console.success(f"Embedded {count} elements into '{config.vector_store.table_name}'")


@main.command()
@click.argument("repo", type=click.Path(exists=True))
@click.option("--kind", "-k", "kinds", multiple=True, default=("all",),
              help="Kind of element to document (repeatable, default: all).")
@click.option("--write-inside", is_flag=True, help="Insert the documentation into the source files.")
@click.option("--output", "-o", default=None, help="Write the generated records to this JSON file.")
@click.option("--path", "-p", default=None, help="Path to the project root.")
def document(repo: str, kinds: tuple[str, ...], write_inside: bool, output: str | None, path: str | None):
    """Generate documentation for the elements of a repository."""
    from rustydocs.docs.generator import document_repository
    from rustydocs.llm.factory import create_provider
    from rustydocs.parser.models import ItemKind

    config = load_config(_get_project_root(path))
    try:
        kinds_to_document = [ItemKind.parse(kind) for kind in kinds]
    except ValueError as e:
        _fail(e)

    repo_root = repo if Path(repo).is_dir() else None
    try:
        code_files = _load_files(repo, config)
        llm = create_provider(config.llm)
        records = asyncio.run(
            document_repository(
                llm,
                code_files,
                kinds_to_document,
                write_inside,
                output,
                repo_root,
                config.indexer.test_module_pattern,
            )
        )
    except RustyDocsError as e:
        _fail(e)

    console.show_documentation(records)
    console.success(f"Documented {len(records)} elements")


@main.command()
@click.argument("question")
@click.option("--limit", "-l", default=None, type=int, help="Elements retrieved by similarity.")
@click.option("--path", "-p", default=None, help="Path to the project root.")
def ask(question: str, limit: int | None, path: str | None):
    """Ask a question about the embedded repository."""
    from rustydocs.context.expander import ask_the_model
    from rustydocs.llm.factory import create_provider

    root = _get_project_root(path)
    config = load_config(root)
    try:
        llm = create_provider(config.llm)
        store = _create_store(root, config)
        answer = asyncio.run(
            ask_the_model(question, llm, store, limit or config.vector_store.search_limit)
        )
    except RustyDocsError as e:
        _fail(e)

    console.show_answer(answer)


@main.command()
@click.argument("name")
@click.argument("repo", type=click.Path(exists=True))
@click.option("--path", "-p", default=None, help="Path to the project root.")
def refs(name: str, repo: str, path: str | None):
    """Show what references an element and what it references."""
    from rustydocs.graph.query import GraphQuery

    config = load_config(_get_project_root(path))
    try:
        code_files = _load_files(repo, config)
    except RustyDocsError as e:
        _fail(e)

    query = GraphQuery(code_files)
    matches = query.find_element(name)
    if not matches:
        console.warning(f"No element found for '{name}'")
        return

    for element_id in matches:
        info = query.get_element_info(element_id)
        console.show_references(element_id, info.implementors, info.dependencies)


@main.command("config")
@click.argument("action", type=click.Choice(["set", "get", "show"]))
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--path", "-p", default=None, help="Path to the project root.")
def config_cmd(action: str, key: str | None, value: str | None, path: str | None):
    """Manage rustydocs configuration."""
    root = _get_project_root(path)
    config = load_config(root)

    if action == "show":
        console.console.print_json(json.dumps(config.model_dump(), indent=2))
    elif action == "get":
        if not key:
            console.error("Usage: rustydocs config get <key>")
            sys.exit(1)
        data = config.model_dump()
        parts = key.split(".")
        for part in parts:
            if isinstance(data, dict) and part in data:
                data = data[part]
            else:
                console.error(f"Unknown key: {key}")
                sys.exit(1)
        console.console.print(f"{key} = {data}")
    elif action == "set":
        if not key or value is None:
            console.error("Usage: rustydocs config set <key> <value>")
            sys.exit(1)
        try:
            # Try to parse as JSON for non-string values
            try:
                parsed_value = json.loads(value)
            except json.JSONDecodeError:
                parsed_value = value

            config = set_config_value(config, key, parsed_value)
            save_config(root, config)
            console.success(f"Set {key} = {parsed_value}")
        except KeyError:
            console.error(f"Unknown config key: {key}")
            sys.exit(1)


if __name__ == "__main__":
    main()
