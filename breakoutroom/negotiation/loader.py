"""Invite loading.

Picks where the invite comes from, in order:

1. An invite set directly in the config
2. A room key, negotiated with the room host
3. A domain, whose TXT records give the room key (and optionally the DID)
4. A single positional argument, taken as the invite
"""

import inspect
import logging
from typing import Any, Dict, Mapping, Optional, Union

from breakoutroom.dns_txt import breakout_room_key, did_key
from breakoutroom.exceptions import ConfigIncompleteError
from breakoutroom.keybase.services import IdentityServices, KeybaseServices
from breakoutroom.models import InviteResult, JoinConfig

from .orchestrator import negotiate
from .ports import ConfirmEnterRoom, RoomConnector

log = logging.getLogger("breakout.negotiation")


async def with_agreeable_key(
    config: JoinConfig,
    confirm_enter_room: ConfirmEnterRoom,
    agreeable_key: str,
    host_extra_info: Dict[str, Any],
    *,
    connect: Optional[RoomConnector] = None,
    services: Optional[IdentityServices] = None,
) -> InviteResult:
    """Negotiate with the room reachable through agreeable_key.

    Raises:
        ConfigIncompleteError: No connector to reach the room.
        RemoteRejectedError: The host declined the join request.
    """
    if connect is None:
        raise ConfigIncompleteError("no room connector configured to reach the room key")

    room = connect(agreeable_key)
    if inspect.isawaitable(room):
        room = await room

    log.info("Negotiating room entry", extra={"room_key": agreeable_key})
    response = await negotiate(
        config,
        confirm_enter_room,
        room,
        services or KeybaseServices(),
        host_extra_info,
    )
    return InviteResult(invite=response.require_invite())


async def handle_invite(
    config: Union[JoinConfig, Mapping[str, Any]],
    confirm_enter_room: ConfirmEnterRoom,
    *,
    connect: Optional[RoomConnector] = None,
    services: Optional[IdentityServices] = None,
) -> InviteResult:
    """Resolve an invite from the join configuration.

    Args:
        config: JoinConfig or its mapping form (camelCase keys accepted).
        confirm_enter_room: Decision port used when a negotiation runs.
        connect: Factory returning the RemoteRoom for a room key.
        services: Identity services; Keybase by default.

    Returns:
        InviteResult; invite is None when the config names no source.
    """
    if not isinstance(config, JoinConfig):
        config = JoinConfig.model_validate(config)

    if config.invite:
        return InviteResult(invite=config.invite)

    if config.agreeable_key:
        return await with_agreeable_key(
            config, confirm_enter_room, config.agreeable_key, {},
            connect=connect, services=services,
        )

    if config.domain:
        agreeable_key = await breakout_room_key(config.domain)
        extra_info: Dict[str, Any] = {}
        if config.load_did:
            did = await did_key(config.domain)
            if did:
                extra_info["did"] = did
        if agreeable_key:
            return await with_agreeable_key(
                config, confirm_enter_room, agreeable_key, extra_info,
                connect=connect, services=services,
            )
        log.info(f"No room key published for {config.domain}", extra={"domain": config.domain})

    if len(config.args) == 1:
        return InviteResult(invite=config.args[0])

    return InviteResult()
