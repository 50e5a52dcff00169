"""Room join negotiation between a participant and a room host."""

from .loader import handle_invite, with_agreeable_key
from .orchestrator import attest_participant_identity, negotiate, verify_host_identity
from .ports import ConfirmEnterRoom, RemoteRoom, RoomConnector

__all__ = [
    "negotiate",
    "verify_host_identity",
    "attest_participant_identity",
    "handle_invite",
    "with_agreeable_key",
    "RemoteRoom",
    "ConfirmEnterRoom",
    "RoomConnector",
]
