"""Collaborator interfaces the negotiation depends on.

The transport that reaches a room host lives outside this package; it
only has to provide RemoteRoom.
"""

from typing import Awaitable, Callable, Protocol, Union

from breakoutroom.models import (
    AcceptDecision,
    ExpectationOptions,
    HostDetails,
    JoinRequest,
    JoinResponse,
    RoomTerms,
)


class RemoteRoom(Protocol):
    """Capability exposed by a remote room host."""

    async def fetch_terms(self, options: ExpectationOptions) -> RoomTerms:
        ...

    async def submit_join(self, request: JoinRequest) -> JoinResponse:
        ...


class ConfirmEnterRoom(Protocol):
    """Decision port: the participant accepts or declines the room terms.

    May return the decision directly or an awaitable (e.g. when asking a
    person interactively).
    """

    def __call__(
        self, terms: RoomTerms, host_details: HostDetails
    ) -> Union[AcceptDecision, Awaitable[AcceptDecision]]:
        ...


# room key -> capability (or an awaitable of one)
RoomConnector = Callable[[str], Union[RemoteRoom, Awaitable[RemoteRoom]]]
