"""Command line interface for signing, verifying and decoding tokens."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer

from jwskit import ALGORITHMS, decode, encode, verify
from jwskit.config import get_config
from jwskit.exceptions import JwsError
from jwskit.logging import configure_logging

app = typer.Typer(help="CLI for JSON Web Signatures")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, help="Log level for jwskit loggers"),
) -> None:
    """jwskit CLI entry point."""
    configure_logging(log_level)


def _read_key(key: Optional[str], key_file: Optional[Path]) -> Any:
    if key is not None and key_file is not None:
        typer.secho("Use either --key or --key-file, not both", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    if key_file is not None:
        if not key_file.exists():
            typer.secho(f"Key file does not exist: {key_file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=2)
        return key_file.read_bytes()
    return key


def _fail(exc: JwsError) -> NoReturn:
    typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=2)


@app.command("sign")
def sign_command(
    payload: str,
    alg: Optional[str] = typer.Option(None, help="Signing algorithm, e.g. HS256"),
    key: Optional[str] = typer.Option(None, help="Shared secret or PEM text"),
    key_file: Optional[Path] = typer.Option(None, help="File holding the key"),
    header: Optional[str] = typer.Option(None, help="Extra header fields as JSON"),
) -> None:
    """
    Sign PAYLOAD and print the compact token.

    The algorithm comes from --alg, then the header's "alg", then the
    configured default (HS256).

    Example:
        jwskit sign '{"sub":"123"}' --alg HS256 --key secret --header '{"typ":"JWT"}'
    """
    headers = {}
    if header:
        try:
            headers = json.loads(header)
        except ValueError as exc:
            typer.secho(f"Invalid header JSON: {exc}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=2)
        if not isinstance(headers, dict):
            typer.secho("Header must be a JSON object", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=2)
    algorithm = alg or headers.get("alg") or get_config().cli.algorithm
    headers = {"alg": algorithm, **{k: v for k, v in headers.items() if k != "alg"}}

    secret_or_key = _read_key(key, key_file)
    try:
        token = encode(headers, payload, secret_or_key)
    except JwsError as exc:
        _fail(exc)
    typer.echo(token)


@app.command("verify")
def verify_command(
    token: str,
    alg: Optional[str] = typer.Option(None, help="Algorithm the token must use"),
    key: Optional[str] = typer.Option(None, help="Shared secret or PEM text"),
    key_file: Optional[Path] = typer.Option(None, help="File holding the key"),
) -> None:
    """
    Verify TOKEN. Prints "valid" (exit 0) or "invalid" (exit 1).

    Example:
        jwskit verify eyJhbGciOi... --alg RS256 --key-file public.pem
    """
    secret_or_key = _read_key(key, key_file)
    try:
        valid = verify(token, alg, secret_or_key)
    except JwsError as exc:
        _fail(exc)
    if not valid:
        typer.echo("invalid")
        raise typer.Exit(code=1)
    typer.echo("valid")


@app.command("decode")
def decode_command(
    token: str,
    json_payload: bool = typer.Option(
        False, "--json", help="Parse the payload as JSON even without typ=JWT"
    ),
) -> None:
    """Print the header and payload of TOKEN without verifying it."""
    try:
        decoded = decode(token, require_json=json_payload)
    except JwsError as exc:
        _fail(exc)
    if decoded is None:
        typer.echo("Invalid token")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(decoded.model_dump(), indent=2))


@app.command("algorithms")
def algorithms_command() -> None:
    """List supported algorithm identifiers."""
    for name in ALGORITHMS:
        typer.echo(name)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
