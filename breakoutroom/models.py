"""
Breakout room protocol models.

Wire records exchanged with a room host, plus the local join configuration.
Field names are snake_case; the camelCase keys used on the wire
(whoamiRequired, challengeText, armoredSignature, ...) are accepted as
aliases and produced by model_dump(by_alias=True).
"""

from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .exceptions import RemoteRejectedError


_WIRE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
)


# =============================================================================
# Identity
# =============================================================================

class SignedText(BaseModel):
    """Challenge text paired with a detached armored signature over it.

    The text is carried exactly as signed. Any change to either field
    must make verification fail.
    """
    model_config = _WIRE_CONFIG

    text: str
    armored_signature: str


class KeybaseIdentity(BaseModel):
    """Identity claim backed by a Keybase account."""
    model_config = _WIRE_CONFIG

    username: str
    challenge_response: SignedText


class Whoami(BaseModel):
    """Identity claim keyed by provider, {"keybase": {...}} on the wire.

    Keybase is the only provider so far; unknown providers are rejected.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    keybase: Optional[KeybaseIdentity] = None


IdentityProof = Optional[Whoami]


class ProofChainEntry(BaseModel):
    """One cross-proof published by the identity provider."""
    model_config = _WIRE_CONFIG

    username: str
    service_url: str
    proof_url: str
    presented_url: Optional[str] = None
    state: int


# proof category (dns, github, twitter, ...) -> proofs in provider order
ProofChain = Dict[str, List[ProofChainEntry]]


class VerifiedIdentity(BaseModel):
    """Outcome of checking a host identity claim.

    Handed to the decision port. Holds no signature material.
    """
    model_config = _WIRE_CONFIG

    username: str
    verified: bool
    chain: Optional[ProofChain] = None


class HostDetails(BaseModel):
    """Context about the host shown to the participant's decision port."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    did: Optional[str] = None
    whoami: Optional[VerifiedIdentity] = None


# =============================================================================
# Terms and join messages
# =============================================================================

class ExpectationOptions(BaseModel):
    """Options sent when fetching room terms."""
    model_config = _WIRE_CONFIG

    challenge_text: Optional[str] = None


class RoomTerms(BaseModel):
    """Terms published by the room host for one negotiation attempt."""
    model_config = _WIRE_CONFIG

    reason: str = Field(description="context for the participants, the reason for the room")
    rules: str = Field(description="rules for participants to follow in the room")
    whoami_required: bool = Field(
        default=False,
        description="whether the participant must prove their identity",
    )
    challenge_text: Optional[str] = Field(
        default=None,
        description="text the participant signs when whoami_required is set",
    )
    whoami: IdentityProof = Field(
        default=None,
        description="host identity claim, present when the participant asked for it",
    )


class AcceptDecision(BaseModel):
    """Participant agreement to the room terms."""
    model_config = _WIRE_CONFIG

    reason: bool
    rules: bool


class JoinRequest(BaseModel):
    """Join request submitted to the room host."""
    model_config = _WIRE_CONFIG

    accept: AcceptDecision
    whoami: IdentityProof = None


class JoinResponse(BaseModel):
    """Terminal outcome of a negotiation attempt, as returned by the host."""
    model_config = _WIRE_CONFIG

    ok: bool
    invite: Optional[str] = None
    reason: Optional[str] = None

    def require_invite(self) -> Optional[str]:
        """Return the invite, raising RemoteRejectedError when ok is False."""
        if not self.ok:
            raise RemoteRejectedError(self.reason)
        return self.invite


# Alias used by callers that only care about the outcome
NegotiationResult = JoinResponse


class InviteResult(BaseModel):
    """Output of the invite loader. invite is None when nothing applied."""
    invite: Optional[str] = None


# =============================================================================
# Local configuration
# =============================================================================

class JoinConfig(BaseModel):
    """Participant-side configuration for joining a room."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    invite: Optional[str] = Field(default=None, description="invite set directly, no lookup")
    agreeable_key: Optional[str] = Field(default=None, description="room key to negotiate with")
    domain: Optional[str] = Field(default=None, description="domain to look the room key up from")
    load_did: bool = Field(default=False, description="whether to load the host DID from the domain")
    host_prove_whoami: bool = Field(default=False, description="require the host to prove its identity")
    keybase_username: Optional[str] = Field(default=None, description="Keybase username for attestation")
    private_key_armored_file: Optional[str] = Field(
        default=None, description="file holding an armored PGP private key"
    )
    private_key_armored: Optional[str] = Field(default=None, description="armored PGP private key")
    private_key_passphrase: Optional[str] = Field(default=None, description="passphrase for the private key")
    args: List[str] = Field(default_factory=list, alias="_", description="positional arguments")

    def has_signing_key(self) -> bool:
        return bool(self.private_key_armored or self.private_key_armored_file)

    def read_private_key(self) -> Optional[str]:
        """Return the armored private key. A key file takes precedence."""
        if self.private_key_armored_file:
            path = Path(self.private_key_armored_file).expanduser().resolve()
            return path.read_text(encoding="utf-8")
        return self.private_key_armored
