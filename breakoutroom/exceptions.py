"""Breakout room negotiation exceptions.

Protocol violations abort a negotiation attempt and surface to the caller.
Identity verification outcomes (a failed signature check, a missing proof
chain) are values, not exceptions, and never appear here. Transport errors
raised by the remote room capability are propagated unchanged.
"""

from typing import Optional


class ErrorCode:
    """Error code registry for negotiation failures."""
    # Protocol layer
    IDENTITY_MISSING = "IDENTITY_MISSING"
    CHALLENGE_MISMATCH = "CHALLENGE_MISMATCH"
    CHALLENGE_TEXT_ABSENT = "CHALLENGE_TEXT_ABSENT"
    REMOTE_REJECTED = "REMOTE_REJECTED"

    # Local layer
    CONFIG_INCOMPLETE = "CONFIG_INCOMPLETE"
    SIGNING_FAILED = "SIGNING_FAILED"


class BreakoutError(Exception):
    """Base exception for breakout room errors.

    Carries an error code from ErrorCode alongside the message.
    """

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class NegotiationError(BreakoutError):
    """A negotiation attempt was aborted."""
    pass


class IdentityMissingError(NegotiationError):
    """The host was asked to prove identity but returned no identity claim."""

    def __init__(self, message: str = "host was to prove whoami but no whoami was returned"):
        super().__init__(ErrorCode.IDENTITY_MISSING, message)


class ChallengeMismatchError(NegotiationError):
    """The attested text differs from the issued challenge.

    Always raised before the decision port runs.
    """

    def __init__(self, message: str = "challengeText was modified"):
        super().__init__(ErrorCode.CHALLENGE_MISMATCH, message)


class ConfigIncompleteError(NegotiationError):
    """Local configuration lacks what a required step needs."""

    def __init__(self, message: str):
        super().__init__(ErrorCode.CONFIG_INCOMPLETE, message)

    @classmethod
    def missing(cls, field: str) -> "ConfigIncompleteError":
        """Factory for a missing configuration field."""
        return cls(f"{field} required in config")


class ChallengeTextAbsentError(NegotiationError):
    """The host requires participant identity but sent nothing to sign."""

    def __init__(self, message: str = "challengeText required in expectations"):
        super().__init__(ErrorCode.CHALLENGE_TEXT_ABSENT, message)


class RemoteRejectedError(NegotiationError):
    """The host answered the join request with ok=False."""

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason
        super().__init__(
            ErrorCode.REMOTE_REJECTED,
            reason or "room host rejected the join request",
        )


class SigningError(BreakoutError):
    """The local private key could not produce a signature."""

    def __init__(self, message: str = "Signing failed"):
        super().__init__(ErrorCode.SIGNING_FAILED, message)
