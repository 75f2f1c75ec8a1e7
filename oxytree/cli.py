"""CLI interface."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import typer

from oxytree.db import SessionLocal, create_tables, engine
from oxytree.errors import DocumentNotFoundError, TreeValidationError
from oxytree.services.document_service import DocumentService
from oxytree.services.storage import SqlDocumentStore
from oxytree.tree import classes as class_ops
from oxytree.tree.canonical import ensure_tree_integrity
from oxytree.tree.formats import decode_stored_tree
from oxytree.tree.stats import flatten_document_tree, tree_stats
from oxytree.tree.walker import find_in_tree
from oxytree.utils.config import settings
from oxytree.validation.validator import validate_document_tree

app = typer.Typer(add_completion=False)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise typer.BadParameter(f"Missing file: {path}")
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid JSON in {path}: {exc}")


def _echo(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")):
    logging.basicConfig(level=logging.DEBUG if verbose else settings.log_level)


@app.command()
def validate(file: Path = typer.Argument(..., help="JSON document tree.")):
    """Validate a document tree and print errors and warnings."""
    result = validate_document_tree(_read_json(file))
    _echo(result.to_dict())
    if not result.valid:
        raise typer.Exit(code=1)


@app.command()
def normalize(
    file: Path = typer.Argument(..., help="JSON document tree or stored payload."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the result here instead of stdout."),
):
    """Canonicalize a tree, decoding legacy storage formats when needed."""
    raw = _read_json(file)
    tree = decode_stored_tree(raw)
    if tree is None:
        tree = ensure_tree_integrity(raw)
    if output:
        output.write_text(json.dumps(tree, indent=2, ensure_ascii=False), encoding="utf-8")
        typer.echo(str(output))
        return
    _echo(tree)


@app.command()
def stats(
    file: Path = typer.Argument(..., help="JSON document tree."),
    elements: bool = typer.Option(False, "--elements", help="Include the flat element list."),
):
    """Print element count, depth and types."""
    tree = decode_stored_tree(_read_json(file)) or {}
    payload = tree_stats(tree)
    if elements:
        payload["elements"] = flatten_document_tree(tree)
    _echo(payload)


@app.command()
def classes(
    file: Path = typer.Argument(..., help="JSON document tree."),
    element_id: str = typer.Argument(..., help="Element id."),
):
    """Print the classes of one element."""
    tree = decode_stored_tree(_read_json(file)) or {}
    node = find_in_tree(tree, element_id)
    if node is None:
        typer.echo(f"Element '{element_id}' not found", err=True)
        raise typer.Exit(code=2)
    names: List[str] = class_ops.extract_classes(node)
    _echo(
        {
            "element_id": node.get("id"),
            "classes": names,
            "custom": class_ops.custom_classes(node),
            "locations": class_ops.class_locations(node),
        }
    )


def _service() -> DocumentService:
    create_tables(engine)
    store = SqlDocumentStore(SessionLocal, mode=settings.builder_mode)
    return DocumentService(store)


@app.command()
def show(document_id: int = typer.Argument(..., help="Stored document id.")):
    """Print a stored document with its summary."""
    try:
        summary = _service().summarize(document_id)
    except DocumentNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2)
    _echo(summary)


@app.command()
def save(
    file: Path = typer.Argument(..., help="JSON document tree."),
    document_id: int = typer.Argument(..., help="Target document id."),
    skip_validation: bool = typer.Option(False, "--skip-validation", help="Store without validating first."),
):
    """Validate, canonicalize and store a document tree."""
    try:
        result = _service().save_tree(document_id, _read_json(file), validate=not skip_validation)
    except TreeValidationError as exc:
        _echo(exc.result.to_dict())
        raise typer.Exit(code=1)
    _echo(result.to_dict())
    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def create(document_id: int = typer.Argument(..., help="New document id.")):
    """Store an empty document tree."""
    result = _service().create_document(document_id)
    _echo(result.to_dict())
    if not result.success:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
