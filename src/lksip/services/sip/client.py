"""
Thin async client over the LiveKit SIP service.

Each coroutine performs exactly one remote call and translates
``livekit.api.TwirpError`` and transport failures (``aiohttp.ClientError``,
timeouts) into ``RemoteError``. Nothing is retried.
"""

import asyncio
import logging
from typing import Dict, List, Optional

import aiohttp
from google.protobuf.message import Message
from livekit import api

from lksip.environment_config import LiveKitProject

from .exceptions import RemoteError
from .resolver import Mode, MutationRequest
from .schemas import DISPATCH_RULE, INBOUND_TRUNK, OUTBOUND_TRUNK, ResourceSchema

logger = logging.getLogger(__name__)

# CreateSIPParticipant waits for the participant to join the room, which
# takes longer than a regular API call.
DEFAULT_PARTICIPANT_TIMEOUT = 30.0

# schema kind -> (replace method, field update method) on livekit.api.SipService
UPDATE_METHODS: Dict[str, tuple] = {
    INBOUND_TRUNK.kind: ("update_inbound_trunk", "update_inbound_trunk_fields"),
    OUTBOUND_TRUNK.kind: ("update_outbound_trunk", "update_outbound_trunk_fields"),
    DISPATCH_RULE.kind: ("update_dispatch_rule", "update_dispatch_rule_fields"),
}


class SIPClient:
    """
    Async context manager owning one ``livekit.api.LiveKitAPI`` session.

    Args:
        project: URL and credentials of the LiveKit project
        lkapi: Pre-built LiveKitAPI (tests); closed on exit like an owned one
    """

    def __init__(self, project: LiveKitProject, lkapi=None):
        self.project = project
        self._lkapi = lkapi

    async def __aenter__(self) -> "SIPClient":
        if self._lkapi is None:
            self._lkapi = api.LiveKitAPI(
                url=self.project.url,
                api_key=self.project.api_key,
                api_secret=self.project.api_secret,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._lkapi is not None:
            await self._lkapi.aclose()
            self._lkapi = None

    @property
    def sip(self):
        if self._lkapi is None:
            raise RuntimeError("SIPClient used outside of 'async with'")
        return self._lkapi.sip

    async def _call(self, operation: str, awaitable):
        logger.debug(f"Calling SIP.{operation} on {self.project.url}")
        try:
            return await awaitable
        except api.TwirpError as e:
            logger.debug(f"SIP.{operation} failed: code={e.code} message={e.message}")
            raise RemoteError.from_twirp(e) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug(f"SIP.{operation} transport failure: {e!r}")
            raise RemoteError(str(e) or type(e).__name__, code="unavailable") from e

    # Inbound trunks

    async def list_inbound_trunks(self) -> List[Message]:
        resp = await self._call("ListSIPInboundTrunk", self.sip.list_inbound_trunk(api.ListSIPInboundTrunkRequest()))
        return list(resp.items)

    async def create_inbound_trunk(self, request: Message) -> Message:
        return await self._call("CreateSIPInboundTrunk", self.sip.create_inbound_trunk(request))

    # Outbound trunks

    async def list_outbound_trunks(self) -> List[Message]:
        resp = await self._call("ListSIPOutboundTrunk", self.sip.list_outbound_trunk(api.ListSIPOutboundTrunkRequest()))
        return list(resp.items)

    async def create_outbound_trunk(self, request: Message) -> Message:
        return await self._call("CreateSIPOutboundTrunk", self.sip.create_outbound_trunk(request))

    async def delete_trunk(self, trunk_id: str) -> Message:
        return await self._call("DeleteSIPTrunk", self.sip.delete_trunk(api.DeleteSIPTrunkRequest(sip_trunk_id=trunk_id)))

    # Dispatch rules

    async def list_dispatch_rules(self) -> List[Message]:
        resp = await self._call("ListSIPDispatchRule", self.sip.list_dispatch_rule(api.ListSIPDispatchRuleRequest()))
        return list(resp.items)

    async def create_dispatch_rule(self, request: Message) -> Message:
        return await self._call("CreateSIPDispatchRule", self.sip.create_dispatch_rule(request))

    async def delete_dispatch_rule(self, rule_id: str) -> Message:
        return await self._call(
            "DeleteSIPDispatchRule",
            self.sip.delete_dispatch_rule(api.DeleteSIPDispatchRuleRequest(sip_dispatch_rule_id=rule_id)),
        )

    # Updates

    async def update(self, schema: ResourceSchema, mutation: MutationRequest) -> Message:
        """
        Send a resolved mutation for any updatable resource kind.

        Replace mode sends the whole replacement record; update mode sends
        only the fields the patch sets.
        """
        replace_method, fields_method = UPDATE_METHODS[schema.kind]
        request = schema.build_request(mutation)
        resource_id = getattr(request, schema.id_field)
        if mutation.mode is Mode.REPLACE:
            return await self._call(
                request.DESCRIPTOR.name + ".replace",
                getattr(self.sip, replace_method)(resource_id, request.replace),
            )
        update = request.update
        fields = {name: getattr(update, name) for name in schema.field_names if update.HasField(name)}
        return await self._call(
            request.DESCRIPTOR.name + ".update",
            getattr(self.sip, fields_method)(resource_id, **fields),
        )

    # Participants

    async def create_sip_participant(self, request: Message, timeout: Optional[float] = None) -> Message:
        timeout = timeout or DEFAULT_PARTICIPANT_TIMEOUT
        try:
            return await asyncio.wait_for(
                self._call("CreateSIPParticipant", self.sip.create_sip_participant(request)),
                timeout,
            )
        except asyncio.TimeoutError:
            raise RemoteError(f"no response within {timeout:g}s", code="deadline_exceeded") from None

    async def transfer_sip_participant(self, request: Message) -> None:
        await self._call("TransferSIPParticipant", self.sip.transfer_sip_participant(request))
