"""Breakout room identity helpers.

Commands:
    breakout challenge                         Print a fresh challenge
    breakout sign <text> --key-file <path>     Sign text with a PGP private key
    breakout verify <text> -s <sig> -u <user>  Verify a signature against Keybase
    breakout proofs <user>                     Show a Keybase proof chain
    breakout resolve <domain>                  Look up a room key from DNS
"""

import asyncio
import json
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer

from breakoutroom.dns_txt import breakout_room_key, did_key
from breakoutroom.exceptions import SigningError
from breakoutroom.keybase import generate_challenge_text, get_proof_chain, sign_text, verify_signed_text
from breakoutroom.logging_config import configure_logging
from breakoutroom.models import SignedText

EXIT_VERIFICATION_FAILURE = 1
EXIT_LOOKUP_FAILURE = 2
EXIT_INPUT_ERROR = 3

app = typer.Typer(
    name="breakout",
    help="Challenge, sign and verify helpers for breakout room negotiation.",
    no_args_is_help=True,
)


def _output(result: Any) -> None:
    typer.echo(json.dumps(result, indent=2, ensure_ascii=False))


def _fail(code: str, message: str, exit_code: int) -> NoReturn:
    typer.echo(json.dumps({"error": {"code": code, "message": message}}), err=True)
    raise typer.Exit(code=exit_code)


def _read_file(path: str, what: str) -> str:
    try:
        return Path(path).expanduser().read_text(encoding="utf-8")
    except OSError as e:
        _fail("INPUT_ERROR", f"cannot read {what}: {e}", EXIT_INPUT_ERROR)


@app.command("challenge")
def challenge_cmd() -> None:
    """Print a new single-use challenge text."""
    typer.echo(generate_challenge_text())


@app.command("sign")
def sign_cmd(
    text: str = typer.Argument(..., help="Exact text to sign"),
    key_file: str = typer.Option(
        ...,
        "--key-file",
        "-k",
        help="File with an armored PGP private key",
    ),
    passphrase: Optional[str] = typer.Option(
        None,
        "--passphrase",
        envvar="BREAKOUT_KEY_PASSPHRASE",
        help="Passphrase for the private key",
    ),
) -> None:
    """Sign challenge text and print the signed response."""
    private_key = _read_file(key_file, "private key")
    try:
        signed = asyncio.run(sign_text(text, private_key, passphrase))
    except SigningError as e:
        _fail(e.code, e.message, EXIT_VERIFICATION_FAILURE)
    _output(signed.model_dump(by_alias=True))


@app.command("verify")
def verify_cmd(
    text: str = typer.Argument(..., help="Text that was signed"),
    signature_file: str = typer.Option(
        ...,
        "--signature-file",
        "-s",
        help="File with the armored detached signature",
    ),
    username: str = typer.Option(
        ...,
        "--username",
        "-u",
        help="Keybase username that claims the signature",
    ),
) -> None:
    """Verify a signed challenge against a Keybase user's public key."""
    signed = SignedText(text=text, armored_signature=_read_file(signature_file, "signature"))
    verified = asyncio.run(verify_signed_text(signed, username))
    _output({"username": username, "verified": verified})
    if not verified:
        raise typer.Exit(code=EXIT_VERIFICATION_FAILURE)


@app.command("proofs")
def proofs_cmd(
    username: str = typer.Argument(..., help="Keybase username"),
) -> None:
    """Print the proof chain a Keybase user has published."""
    chain = asyncio.run(get_proof_chain(username))
    if chain is None:
        _fail("PROOF_CHAIN_UNAVAILABLE", f"no proof chain for {username}", EXIT_LOOKUP_FAILURE)
    _output({
        category: [entry.model_dump(by_alias=True) for entry in entries]
        for category, entries in chain.items()
    })


@app.command("resolve")
def resolve_cmd(
    domain: str = typer.Argument(..., help="Domain publishing a _breakoutroom TXT record"),
    did: bool = typer.Option(False, "--did", help="Also look up the _atproto DID"),
) -> None:
    """Look up the room key (and optionally the DID) for a domain."""

    async def lookup():
        key = await breakout_room_key(domain)
        return key, (await did_key(domain) if did else None)

    key, did_value = asyncio.run(lookup())
    if key is None:
        _fail("ROOM_KEY_NOT_FOUND", f"no room key published for {domain}", EXIT_LOOKUP_FAILURE)
    result = {"domain": domain, "key": key}
    if did:
        result["did"] = did_value
    _output(result)


def main() -> None:
    configure_logging()
    app()


if __name__ == "__main__":
    main()
