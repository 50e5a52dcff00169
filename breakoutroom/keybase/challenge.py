"""Challenge-response identity checks backed by Keybase PGP keys.

A verifier issues unpredictable challenge text, the prover signs it with
its OpenPGP private key, and the verifier checks the detached signature
against the public key Keybase publishes for the claimed username.

Signatures are made in binary mode over the UTF-8 bytes of the text, so
no line-ending or whitespace normalization happens between signing and
verification. Verification accepts binary signatures only; a valid
text-mode signature is rejected.

GnuPG runs as a subprocess through python-gnupg. Every operation gets a
throw-away home directory, so no keyring state is shared between calls.
"""

import asyncio
import logging
import os
import re
import secrets
import tempfile
import time
from typing import Optional

import gnupg
import httpx

from breakoutroom.core.config import (
    CHALLENGE_ENTROPY_BYTES,
    GPG_BINARY,
    KEYBASE_BASE_URL,
    KEYBASE_TIMEOUT_SECONDS,
)
from breakoutroom.exceptions import SigningError
from breakoutroom.models import SignedText

logger = logging.getLogger("breakout.keybase")

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")

# OpenPGP signature class 0x00, a signature over the exact document bytes.
# Class 0x01 (canonical text) normalizes line endings before hashing.
BINARY_SIGNATURE_CLASS = "00"


def is_valid_username(username: Optional[str]) -> bool:
    """Reject names that could escape the Keybase URL path."""
    return bool(username) and _USERNAME_RE.match(username) is not None


def generate_challenge_text() -> str:
    """Return fresh challenge text: random hex plus a millisecond timestamp."""
    return f"{secrets.token_hex(CHALLENGE_ENTROPY_BYTES)}-{int(time.time() * 1000)}"


def _gpg(home: str) -> gnupg.GPG:
    return gnupg.GPG(gnupghome=home, gpgbinary=GPG_BINARY)


def _sign_blocking(text: str, private_key_armored: str, passphrase: Optional[str]) -> str:
    with tempfile.TemporaryDirectory(prefix="breakout-gpg-") as home:
        gpg = _gpg(home)
        imported = gpg.import_keys(private_key_armored, passphrase=passphrase)
        if not imported.fingerprints:
            raise SigningError("private key could not be imported")

        signature = gpg.sign(
            text.encode("utf-8"),
            keyid=imported.fingerprints[0],
            passphrase=passphrase,
            detach=True,
            clearsign=False,
        )
        if not signature.data:
            raise SigningError(f"gpg produced no signature: {signature.status}")
        return str(signature)


def _verify_blocking(signed: SignedText, public_key_armored: str) -> bool:
    with tempfile.TemporaryDirectory(prefix="breakout-gpg-") as home:
        gpg = _gpg(home)
        imported = gpg.import_keys(public_key_armored)
        if not imported.fingerprints:
            logger.warning("Public key could not be imported")
            return False

        sig_path = os.path.join(home, "challenge.sig")
        with open(sig_path, "w", encoding="utf-8") as f:
            f.write(signed.armored_signature)

        result = gpg.verify_data(sig_path, signed.text.encode("utf-8"))
        if not result.valid:
            return False

        sig_class = _signature_class(result)
        if sig_class != BINARY_SIGNATURE_CLASS:
            logger.warning(f"Rejecting signature of class {sig_class}, only binary signatures are accepted")
            return False
        return True


def _signature_class(result: gnupg.Verify) -> Optional[str]:
    """Return the signature class gpg reported in the VALIDSIG status line."""
    for line in (result.stderr or "").splitlines():
        parts = line.split()
        # [GNUPG:] VALIDSIG <fpr> <date> <ts> <expire> <version> <reserved> <pk-algo> <hash-algo> <class> ...
        if parts[:2] == ["[GNUPG:]", "VALIDSIG"] and len(parts) >= 11:
            return parts[10].lower()
    return None


async def sign_text(
    text: str,
    private_key_armored: str,
    passphrase: Optional[str] = None,
) -> SignedText:
    """Sign text with an armored OpenPGP private key.

    Args:
        text: Exact text to sign. Returned unchanged in the result.
        private_key_armored: ASCII-armored private key.
        passphrase: Passphrase for the key, if it is protected.

    Returns:
        SignedText holding the text and a detached armored signature.

    Raises:
        SigningError: The key could not be imported or produced no signature.
    """
    armored_signature = await asyncio.to_thread(
        _sign_blocking, text, private_key_armored, passphrase
    )
    return SignedText(text=text, armored_signature=armored_signature)


async def fetch_public_key(username: str) -> Optional[str]:
    """Fetch the armored PGP public key Keybase publishes for a user.

    Returns:
        The armored key, or None on any lookup failure.
    """
    if not is_valid_username(username):
        logger.debug(f"Invalid Keybase username: {username!r}")
        return None

    url = f"{KEYBASE_BASE_URL}/{username}/pgp_keys.asc"

    try:
        async with httpx.AsyncClient(timeout=KEYBASE_TIMEOUT_SECONDS) as client:
            response = await client.get(url)

            if response.status_code < 200 or response.status_code >= 300:
                logger.warning(
                    f"Keybase key lookup HTTP {response.status_code} for {username}"
                )
                return None

            key = response.text
            if not key or not key.strip():
                logger.warning(f"Keybase returned an empty key for {username}")
                return None
            return key

    except httpx.TimeoutException:
        logger.warning(f"Keybase key lookup timeout for {username}")
        return None
    except Exception as e:
        logger.warning(f"Keybase key lookup failed for {username}: {e}")
        return None


async def verify_signed_text(signed: SignedText, username: str) -> bool:
    """Check a signed challenge against a Keybase user's public key.

    Never raises: an unresolvable key, a malformed signature or a failed
    cryptographic check all return False.
    """
    public_key = await fetch_public_key(username)
    if public_key is None:
        return False

    try:
        verified = await asyncio.to_thread(_verify_blocking, signed, public_key)
    except Exception as e:
        logger.warning(f"Signature verification error for {username}: {e}")
        return False

    if not verified:
        logger.info(f"Signature did not verify for {username}")
    return verified
