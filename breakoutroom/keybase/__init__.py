"""Keybase identity provider integration.

Challenge generation, OpenPGP signing and verification, and proof chain
lookup for Keybase accounts.
"""

from .challenge import (
    fetch_public_key,
    generate_challenge_text,
    sign_text,
    verify_signed_text,
)
from .proofs import ProofChainFormatError, get_proof_chain, parse_proofs_summary
from .services import IdentityServices, KeybaseServices

__all__ = [
    "generate_challenge_text",
    "sign_text",
    "verify_signed_text",
    "fetch_public_key",
    "get_proof_chain",
    "parse_proofs_summary",
    "ProofChainFormatError",
    "IdentityServices",
    "KeybaseServices",
]
