"""Keybase proof chain lookup.

Fetches the cross-proofs (domains, social accounts) a Keybase user has
published and groups them by proof type. The chain is context for the
person deciding whether to join, not a trust decision, so every failure
mode degrades to None.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from breakoutroom.core.config import KEYBASE_BASE_URL, KEYBASE_TIMEOUT_SECONDS
from breakoutroom.models import ProofChain, ProofChainEntry

from .challenge import is_valid_username

logger = logging.getLogger("breakout.keybase")


class ProofChainFormatError(ValueError):
    """Keybase lookup response did not have the expected shape."""
    pass


def parse_proofs_summary(data: Any) -> ProofChain:
    """Parse a Keybase user lookup response into a ProofChain.

    Args:
        data: Decoded JSON from user/lookup.json with fields=proofs_summary.

    Returns:
        Proofs grouped by proof_type, in the order Keybase lists them.

    Raises:
        ProofChainFormatError: Missing user, proofs_summary or entry fields.
    """
    if not isinstance(data, dict):
        raise ProofChainFormatError("response is not an object")

    them = data.get("them")
    # lookup by usernames= answers with a list
    if isinstance(them, list):
        them = them[0] if them else None
    if not isinstance(them, dict):
        raise ProofChainFormatError("user not found")

    summary = them.get("proofs_summary")
    if not isinstance(summary, dict) or not isinstance(summary.get("all"), list):
        raise ProofChainFormatError("no proofs available")

    chain: ProofChain = {}
    for proof in summary["all"]:
        if not isinstance(proof, dict) or "proof_type" not in proof:
            raise ProofChainFormatError("proof entry without proof_type")
        try:
            entry = ProofChainEntry(
                username=proof.get("nametag"),
                service_url=proof.get("service_url"),
                proof_url=proof.get("proof_url"),
                presented_url=proof.get("presentation_url"),
                state=proof.get("state"),
            )
        except ValidationError as e:
            raise ProofChainFormatError(f"invalid proof entry: {e}") from e
        chain.setdefault(proof["proof_type"], []).append(entry)
    return chain


async def get_proof_chain(username: str) -> Optional[ProofChain]:
    """Fetch and normalize the proof chain for a Keybase user.

    Returns:
        ProofChain, or None if the lookup failed or the response was malformed.
    """
    if not is_valid_username(username):
        logger.debug(f"Invalid Keybase username: {username!r}")
        return None

    url = f"{KEYBASE_BASE_URL}/_/api/1.0/user/lookup.json"
    params = {"username": username, "fields": "proofs_summary"}

    try:
        async with httpx.AsyncClient(timeout=KEYBASE_TIMEOUT_SECONDS) as client:
            response = await client.get(url, params=params)
            response.raise_for_status()
            chain = parse_proofs_summary(response.json())
            logger.debug(f"Keybase proof chain for {username}: {sorted(chain)}")
            return chain

    except httpx.TimeoutException:
        logger.warning(f"Keybase proof lookup timeout for {username}")
        return None
    except httpx.HTTPStatusError as e:
        logger.warning(f"Keybase proof lookup HTTP error for {username}: {e}")
        return None
    except ProofChainFormatError as e:
        logger.warning(f"Keybase proof lookup for {username}: {e}")
        return None
    except Exception as e:
        logger.warning(f"Keybase proof lookup failed for {username}: {e}")
        return None
