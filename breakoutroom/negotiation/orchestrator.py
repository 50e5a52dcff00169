"""Room join negotiation.

One call to negotiate() is one attempt, run as a single sequential chain:

1. Issue a challenge if the host must prove its identity
2. Fetch the room terms
3. Check the host's signed challenge and look up its proof chain
4. Ask the decision port whether to accept
5. Sign the host's challenge if the host requires participant identity
6. Submit the join request and return the host's answer

The challenge lives only in this call. A host answer that does not echo
the exact challenge aborts the attempt before any verification or
decision happens.
"""

import inspect
import logging
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel

from breakoutroom.exceptions import (
    ChallengeMismatchError,
    ChallengeTextAbsentError,
    ConfigIncompleteError,
    IdentityMissingError,
    SigningError,
)
from breakoutroom.keybase.challenge import generate_challenge_text
from breakoutroom.keybase.services import IdentityServices
from breakoutroom.models import (
    AcceptDecision,
    ExpectationOptions,
    HostDetails,
    JoinConfig,
    JoinRequest,
    JoinResponse,
    KeybaseIdentity,
    RoomTerms,
    VerifiedIdentity,
    Whoami,
)

from .ports import ConfirmEnterRoom, RemoteRoom

log = logging.getLogger("breakout.negotiation")

M = TypeVar("M", bound=BaseModel)


def _coerce(model: Type[M], value: Any) -> M:
    """Accept either a model instance or its wire mapping."""
    if isinstance(value, model):
        return value
    return model.model_validate(value)


async def verify_host_identity(
    terms: RoomTerms,
    challenge: str,
    services: IdentityServices,
    logger: logging.Logger = log,
) -> VerifiedIdentity:
    """Check the host's answer to our challenge.

    Raises:
        IdentityMissingError: Terms carry no Keybase identity claim.
        ChallengeMismatchError: The signed text is not our challenge.
    """
    claim = terms.whoami.keybase if terms.whoami is not None else None
    if claim is None:
        raise IdentityMissingError()

    if claim.challenge_response.text != challenge:
        logger.warning(
            "Host signed text does not match the issued challenge",
            extra={"username": claim.username},
        )
        raise ChallengeMismatchError()

    verified = await services.verify_signed_text(claim.challenge_response, claim.username)
    chain = await services.get_proof_chain(claim.username)
    logger.info(
        f"Host identity {claim.username}: verified={verified} "
        f"proofs={sorted(chain) if chain else []}",
        extra={"username": claim.username},
    )
    return VerifiedIdentity(username=claim.username, verified=bool(verified), chain=chain)


async def attest_participant_identity(
    config: JoinConfig,
    terms: RoomTerms,
    services: IdentityServices,
) -> Whoami:
    """Sign the host's challenge with the configured key.

    Raises:
        ConfigIncompleteError: No Keybase username or no private key configured.
        ChallengeTextAbsentError: The host sent no challenge text.
        SigningError: The signer returned a different text than it was given.
    """
    if not config.keybase_username:
        raise ConfigIncompleteError.missing("keybase_username")
    if not config.has_signing_key():
        raise ConfigIncompleteError.missing("private_key_armored or private_key_armored_file")
    if not terms.challenge_text:
        raise ChallengeTextAbsentError()

    private_key = config.read_private_key()
    signed = await services.sign_text(
        terms.challenge_text, private_key, passphrase=config.private_key_passphrase
    )
    if signed.text != terms.challenge_text:
        raise SigningError("signed text differs from the challenge text")
    return Whoami(keybase=KeybaseIdentity(
        username=config.keybase_username, challenge_response=signed
    ))


async def negotiate(
    config: JoinConfig,
    confirm_enter_room: ConfirmEnterRoom,
    room: RemoteRoom,
    services: IdentityServices,
    host_extra_info: Optional[Dict[str, Any]] = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> JoinResponse:
    """Run one negotiation attempt against a room host.

    Args:
        config: Participant configuration.
        confirm_enter_room: Decision port, called with the terms and HostDetails.
        room: Remote room capability.
        services: Identity services for signing and verification.
        host_extra_info: Extra host context (e.g. {"did": ...}) for HostDetails.
        logger: Logger to use instead of the module logger.

    Returns:
        The host's JoinResponse, unchanged. ok=False is a valid result;
        use JoinResponse.require_invite() to turn it into RemoteRejectedError.

    Raises:
        IdentityMissingError, ChallengeMismatchError, ConfigIncompleteError,
        ChallengeTextAbsentError: Protocol violations, the attempt is aborted.
        Exceptions from the room capability propagate unchanged.
    """
    logger = logger or log

    challenge = generate_challenge_text() if config.host_prove_whoami else None
    options = ExpectationOptions(challenge_text=challenge)

    terms = _coerce(RoomTerms, await room.fetch_terms(options))
    logger.debug(
        f"Room terms received: whoami_required={terms.whoami_required} "
        f"host_whoami={terms.whoami is not None}"
    )

    host_details = HostDetails(**(host_extra_info or {}))
    if challenge is not None:
        host_details.whoami = await verify_host_identity(terms, challenge, services, logger)
    elif terms.whoami is not None:
        logger.debug("Ignoring host identity claim that was not requested")

    decision = confirm_enter_room(terms, host_details)
    if inspect.isawaitable(decision):
        decision = await decision
    accept = _coerce(AcceptDecision, decision)

    whoami = None
    if terms.whoami_required:
        whoami = await attest_participant_identity(config, terms, services)

    response = _coerce(
        JoinResponse,
        await room.submit_join(JoinRequest(accept=accept, whoami=whoami)),
    )
    if response.ok:
        logger.info("Join request accepted")
    else:
        logger.warning(f"Join request rejected: {response.reason}")
    return response
