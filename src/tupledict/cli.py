from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

import typer

from tupledict.algorithms import supported_algorithms
from tupledict.config import configured_hash_algorithm
from tupledict.exceptions import TupleDictError
from tupledict.snapshot import decode_key, encode_key, read_snapshot, write_snapshot
from tupledict.store import TupleDictionary

app = typer.Typer(add_completion=False, help="Inspect and edit tuple dictionary snapshots.")

logger = logging.getLogger(__name__)

_ERROR_EXIT_CODE = 2


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging."),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
        logger.debug("Verbose logging enabled.")


@contextmanager
def _reported_errors() -> Generator[None, None, None]:
    try:
        yield
    except TupleDictError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=_ERROR_EXIT_CODE) from exc


def _parse_json(text: str, *, param: str) -> object:
    try:
        return json.loads(text)
    except ValueError as exc:
        raise typer.BadParameter(f"{param} must be JSON ({exc})") from exc


def _parse_key(text: str) -> object:
    return decode_key(_parse_json(text, param="KEY"))


def _dump_json(value: object) -> str:
    return json.dumps(value, sort_keys=False, separators=(",", ":"))


@app.command("algorithms")
def algorithms() -> None:
    """List the supported digest algorithms."""
    for name in supported_algorithms():
        typer.echo(name)


@app.command("fingerprint")
def fingerprint(
    key: str = typer.Argument(..., help="Composite key as JSON."),
    algorithm: Optional[str] = typer.Option(None, "--algorithm", "-a"),
    root: Path = typer.Option(Path("."), "--root"),
    config: Optional[Path] = typer.Option(None, "--config"),
) -> None:
    """Print the combined fingerprint of KEY followed by its element fingerprints."""
    with _reported_errors():
        name = algorithm or configured_hash_algorithm(root=root, config_path=config)
        result = TupleDictionary(name).fingerprint_key(_parse_key(key))
    typer.echo(result.fingerprint)
    for element_hash, element in result.element_hashes.items():
        typer.echo(f"  {element_hash} {_dump_json(encode_key(element))}")


@app.command("put")
def put(
    snapshot: Path = typer.Argument(..., help="Snapshot file; created when missing."),
    key: str = typer.Argument(..., help="Composite key as JSON."),
    value: str = typer.Argument(..., help="Value as JSON."),
    algorithm: Optional[str] = typer.Option(
        None, "--algorithm", "-a", help="Algorithm for a new snapshot."
    ),
    root: Path = typer.Option(Path("."), "--root"),
    config: Optional[Path] = typer.Option(None, "--config"),
) -> None:
    """Store VALUE under KEY."""
    parsed_key = _parse_key(key)
    parsed_value = _parse_json(value, param="VALUE")
    with _reported_errors():
        if snapshot.exists():
            store = read_snapshot(snapshot)
        else:
            store = TupleDictionary(
                algorithm or configured_hash_algorithm(root=root, config_path=config)
            )
        result = store.insert(parsed_key, parsed_value)
        write_snapshot(store, snapshot)
    typer.echo(result.fingerprint)


@app.command("get")
def get(
    snapshot: Path = typer.Argument(...),
    key: str = typer.Argument(..., help="Composite key as JSON."),
    default: str = typer.Option("null", "--default", help="JSON printed when KEY is absent."),
) -> None:
    """Print the value stored under KEY."""
    parsed_key = _parse_key(key)
    parsed_default = _parse_json(default, param="--default")
    with _reported_errors():
        store = read_snapshot(snapshot)
        found = store.get(parsed_key, parsed_default)
    typer.echo(_dump_json(found))


@app.command("delete")
def delete(
    snapshot: Path = typer.Argument(...),
    key: str = typer.Argument(..., help="Composite key as JSON."),
) -> None:
    """Remove KEY; exits with 1 when it is not present."""
    parsed_key = _parse_key(key)
    with _reported_errors():
        store = read_snapshot(snapshot)
        removed = store.delete(parsed_key)
        if removed:
            write_snapshot(store, snapshot)
    if not removed:
        typer.echo("key not found", err=True)
        raise typer.Exit(code=1)


@app.command("keys")
def keys(
    snapshot: Path = typer.Argument(...),
) -> None:
    """Print every stored key, one JSON document per line."""
    with _reported_errors():
        store = read_snapshot(snapshot)
    for stored_key in store.keys():
        typer.echo(_dump_json(encode_key(stored_key)))
