"""CLI entry point for trust-cards.

Invoked as::

    trust-cards [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m trust_cards.cli.main

Commands
--------
version          Show version information
keys generate    Generate an Ed25519 key pair
card create      Build and self-sign a card creation request
card inspect     Show the contents of an exported card
card validate    Validate an exported card against a verifier set
card revoke      Build and authority-sign a card revocation request
token generate   Issue a signed access token
token inspect    Decode a token without verifying it
token verify     Verify a token's header and signature
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from trust_cards import __version__
from trust_cards.audit import TrustAuditLogger
from trust_cards.buffer import b64_encode
from trust_cards.cards import (
    Card,
    CardScope,
    CardValidator,
    CreateCardRequest,
    RequestSigner,
    RevocationReason,
    RevokeCardRequest,
)
from trust_cards.config import TrustCardsConfig, load_config
from trust_cards.crypto import Ed25519CryptoProvider
from trust_cards.errors import TrustCardsError
from trust_cards.jwt import AccessTokenSigner, Jwt, JwtGenerator, JwtVerifier

console = Console()


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="trust-cards")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Diagnostic logging level (written to stderr).",
)
def cli(log_level: str) -> None:
    """Signed identity cards and access tokens"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    console.print(f"[bold]trust-cards[/bold] v{__version__}")


# ------------------------------------------------------------------
# keys command group
# ------------------------------------------------------------------


@cli.group(name="keys")
def keys_group() -> None:
    """Manage key pairs."""


@keys_group.command(name="generate")
@click.option(
    "--private-out",
    type=click.Path(dir_okay=False),
    required=True,
    help="Write the DER PKCS#8 private key here.",
)
@click.option(
    "--public-out",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write the DER public key here.",
)
@click.option("--password", default=None, help="Encrypt the private key with this password.")
def keys_generate_command(
    private_out: str,
    public_out: str | None,
    password: str | None,
) -> None:
    """Generate an Ed25519 key pair."""
    crypto = Ed25519CryptoProvider()
    keys = crypto.generate_keys()
    password_bytes = password.encode("utf-8") if password else None

    Path(private_out).write_bytes(crypto.export_private_key(keys.private_key, password_bytes))
    public_der = crypto.export_public_key(keys.public_key)
    if public_out:
        Path(public_out).write_bytes(public_der)

    console.print(f"[green]Private key written to[/green] {private_out}")
    if public_out:
        console.print(f"[green]Public key written to[/green] {public_out}")
    console.print(f"  Public key (base64): {b64_encode(public_der)}")


# ------------------------------------------------------------------
# card command group
# ------------------------------------------------------------------


@cli.group(name="card")
def card_group() -> None:
    """Create, inspect, validate, and revoke cards."""


@card_group.command(name="create")
@click.argument("identity")
@click.option("--identity-type", "-t", default="username", show_default=True)
@click.option(
    "--private-key",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Private key of the card being created (self-signs the request).",
)
@click.option("--password", default=None, help="Password of the private key, if encrypted.")
@click.option(
    "--scope",
    type=click.Choice([scope.value for scope in CardScope]),
    default=CardScope.APPLICATION.value,
    show_default=True,
)
@click.option(
    "--data",
    "-d",
    multiple=True,
    help="Custom data entry KEY=VALUE (repeatable, at most 16).",
)
@click.option("--device", default=None, help="Device type, e.g. 'iPhone'.")
@click.option("--device-name", default=None, help="Device name, e.g. 'Alice's phone'.")
@click.option("--authority-id", default=None, help="Also sign as this authority (app id).")
@click.option(
    "--authority-key",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Private key of the authority given by --authority-id.",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the exported request to this file.",
)
def card_create_command(
    identity: str,
    identity_type: str,
    private_key: str,
    password: str | None,
    scope: str,
    data: tuple[str, ...],
    device: str | None,
    device_name: str | None,
    authority_id: str | None,
    authority_key: str | None,
    output: str | None,
) -> None:
    """Build a self-signed creation request for IDENTITY and print its export."""
    if bool(authority_id) != bool(authority_key):
        _fail("--authority-id and --authority-key must be given together")

    crypto = Ed25519CryptoProvider()
    config = _load_config()
    audit_logger = _audit_logger(config.audit_log_path)
    try:
        card_key = crypto.import_private_key(Path(private_key).read_bytes(), _password(password))
        info = {
            key: value
            for key, value in (("device", device), ("device_name", device_name))
            if value
        }
        request = CreateCardRequest(
            identity=identity,
            identity_type=identity_type,
            public_key=crypto.export_public_key(crypto.extract_public_key(card_key)),
            scope=scope,
            data=_parse_pairs(data),
            info=info,
        )
        signer = RequestSigner(crypto, audit_logger=audit_logger)
        fingerprint_hex = signer.self_sign(request, card_key)
        if authority_id and authority_key:
            signer.authority_sign(
                request,
                authority_id,
                crypto.import_private_key(Path(authority_key).read_bytes()),
            )
    except TrustCardsError as exc:
        _fail(str(exc))

    exported = request.export()
    if output:
        Path(output).write_text(exported + "\n", encoding="utf-8")
        console.print(f"[green]Request written to[/green] {output}")
        console.print(f"  Fingerprint: [bold]{fingerprint_hex}[/bold]", highlight=False)
    else:
        click.echo(exported)


@card_group.command(name="inspect")
@click.argument("exported")
def card_inspect_command(exported: str) -> None:
    """Show the contents of an EXPORTED card (string or file path)."""
    crypto = Ed25519CryptoProvider()
    try:
        card = Card.import_card(_read_value(exported))
    except TrustCardsError as exc:
        _fail(str(exc))

    table = Table(title=f"Card: {card.identity}", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Identity", card.identity)
    table.add_row("Identity type", card.identity_type)
    table.add_row("Scope", card.scope.value)
    table.add_row("Fingerprint", crypto.calculate_fingerprint(card.snapshot).to_hex())
    table.add_row("Public key", b64_encode(card.public_key))
    table.add_row("Device", card.device or "-")
    table.add_row("Device name", card.device_name or "-")
    for key, value in sorted(card.data.items()):
        table.add_row(f"data.{key}", value)
    table.add_row("Signers", "\n".join(sorted(card.signatures)) or "(none)")
    console.print(table)


@card_group.command(name="validate")
@click.argument("exported")
@click.option(
    "--card-id",
    default=None,
    help="Id the card was published under. Defaults to its snapshot fingerprint.",
)
@click.option(
    "--verifier",
    "-v",
    multiple=True,
    help="Additional required verifier as ID=PUBLIC_KEY_FILE (repeatable).",
)
@click.option(
    "--no-default-verifiers",
    is_flag=True,
    default=False,
    help="Do not require the cards service signature.",
)
def card_validate_command(
    exported: str,
    card_id: str | None,
    verifier: tuple[str, ...],
    no_default_verifiers: bool,
) -> None:
    """Validate an EXPORTED card (string or file path)."""
    crypto = Ed25519CryptoProvider()
    config = _load_config()
    try:
        card = Card.import_card(_read_value(exported))
        card.id = card_id or crypto.calculate_fingerprint(card.snapshot).to_hex()
        validator = CardValidator(
            crypto,
            include_default_verifiers=not no_default_verifiers,
            audit_logger=_audit_logger(config.audit_log_path),
            service_card_id=config.service_card_id,
            service_public_key=config.service_public_key,
        )
        for verifier_id, key_path in _parse_pairs(verifier).items():
            validator.add_verifier(verifier_id, Path(key_path).read_bytes())
    except (TrustCardsError, OSError) as exc:
        _fail(str(exc))

    if validator.is_valid(card):
        console.print(f"[green]VALID[/green]  card {card.id}", highlight=False)
    else:
        console.print(f"[red]INVALID[/red]  card {card.id}", highlight=False)
        sys.exit(1)


@card_group.command(name="revoke")
@click.argument("card_id")
@click.option("--authority-id", required=True, help="Id the revocation is signed under.")
@click.option(
    "--authority-key",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Private key of the authority.",
)
@click.option(
    "--reason",
    type=click.Choice([reason.value for reason in RevocationReason]),
    default=RevocationReason.UNSPECIFIED.value,
    show_default=True,
)
def card_revoke_command(
    card_id: str,
    authority_id: str,
    authority_key: str,
    reason: str,
) -> None:
    """Build an authority-signed revocation request for CARD_ID."""
    crypto = Ed25519CryptoProvider()
    config = _load_config()
    try:
        request = RevokeCardRequest(card_id, reason)
        RequestSigner(crypto, audit_logger=_audit_logger(config.audit_log_path)).authority_sign(
            request,
            authority_id,
            crypto.import_private_key(Path(authority_key).read_bytes()),
        )
    except TrustCardsError as exc:
        _fail(str(exc))
    click.echo(request.export())


# ------------------------------------------------------------------
# token command group
# ------------------------------------------------------------------


@cli.group(name="token")
def token_group() -> None:
    """Issue, inspect, and verify access tokens."""


@token_group.command(name="generate")
@click.argument("identity")
@click.option(
    "--private-key",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Application API private key.",
)
@click.option("--app-id", default=None, help="Application id (or TRUST_CARDS_APP_ID).")
@click.option("--key-id", default=None, help="API key id (or TRUST_CARDS_API_KEY_ID).")
@click.option(
    "--lifetime",
    type=int,
    default=None,
    help="Lifetime in minutes (or TRUST_CARDS_TOKEN_LIFETIME_MINUTES, default 20).",
)
@click.option("--data", default=None, help="JSON object of additional claims.")
def token_generate_command(
    identity: str,
    private_key: str,
    app_id: str | None,
    key_id: str | None,
    lifetime: int | None,
    data: str | None,
) -> None:
    """Issue a signed token for IDENTITY."""
    overrides: dict[str, Any] = {}
    if app_id:
        overrides["app_id"] = app_id
    if key_id:
        overrides["api_key_id"] = key_id
    if lifetime is not None:
        overrides["token_lifetime_minutes"] = lifetime
    config = _load_config(overrides)
    if not config.app_id or not config.api_key_id:
        _fail("--app-id and --key-id are required (or set them in the environment)")

    additional: dict[str, Any] | None = None
    if data:
        try:
            additional = json.loads(data)
        except json.JSONDecodeError as exc:
            _fail(f"--data is not valid JSON: {exc}")
        if not isinstance(additional, dict):
            _fail("--data must be a JSON object")

    signer = AccessTokenSigner()
    try:
        api_key = signer.crypto.import_private_key(Path(private_key).read_bytes())
        token = JwtGenerator.from_config(config, api_key, signer).generate_token(
            identity, additional
        )
    except TrustCardsError as exc:
        _fail(str(exc))
    click.echo(str(token))


@token_group.command(name="inspect")
@click.argument("token")
def token_inspect_command(token: str) -> None:
    """Decode TOKEN (string or file path) without verifying it."""
    try:
        jwt = Jwt.from_string(_read_value(token))
    except TrustCardsError as exc:
        _fail(str(exc))

    header = jwt.header_content
    body = jwt.body_content
    table = Table(title="Access token", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Algorithm", header.algorithm)
    table.add_row("Key id", header.key_id)
    table.add_row("Content type", header.content_type)
    table.add_row("App id", body.app_id)
    table.add_row("Identity", body.identity)
    table.add_row("Issued at", body.issued_at.isoformat())
    table.add_row("Expires at", body.expires_at.isoformat())
    table.add_row("Expired", "yes" if jwt.is_expired() else "no")
    if body.additional_data:
        table.add_row("Additional data", json.dumps(dict(body.additional_data)))
    console.print(table)


@token_group.command(name="verify")
@click.argument("token")
@click.option(
    "--public-key",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="Application API public key.",
)
@click.option("--key-id", default=None, help="Expected API key id (or TRUST_CARDS_API_KEY_ID).")
def token_verify_command(token: str, public_key: str, key_id: str | None) -> None:
    """Verify TOKEN (string or file path): header, signature, and expiry."""
    config = _load_config({"api_key_id": key_id} if key_id else None)
    signer = AccessTokenSigner()
    try:
        jwt = Jwt.from_string(_read_value(token))
        verifier = JwtVerifier(
            signer,
            signer.crypto.import_public_key(Path(public_key).read_bytes()),
            config.api_key_id,
        )
        verifier.require_valid(jwt)
    except TrustCardsError as exc:
        _fail(str(exc))

    if jwt.is_expired():
        console.print(f"[yellow]EXPIRED[/yellow]  token for {jwt.identity}")
        sys.exit(1)
    console.print(
        f"[green]VALID[/green]  token for {jwt.identity} "
        f"(expires {jwt.expires_at.isoformat()})"
    )


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
    sys.exit(1)


def _load_config(overrides: dict[str, Any] | None = None) -> TrustCardsConfig:
    try:
        return load_config(overrides)
    except ValidationError as exc:
        _fail(f"invalid configuration: {exc}")


def _password(password: str | None) -> bytes | None:
    return password.encode("utf-8") if password else None


def _read_value(value: str) -> str:
    """Return the content of *value* if it names a file, else *value* itself."""
    path = Path(value)
    try:
        is_file = path.is_file()
    except OSError:
        # exported blobs can exceed the file name length limit
        is_file = False
    if is_file:
        return path.read_text(encoding="utf-8").strip()
    return value.strip()


def _parse_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            _fail(f"expected KEY=VALUE, got {pair!r}")
        parsed[key] = value
    return parsed


def _audit_logger(path: Path | None) -> TrustAuditLogger | None:
    return TrustAuditLogger(path) if path is not None else None


if __name__ == "__main__":
    cli()
