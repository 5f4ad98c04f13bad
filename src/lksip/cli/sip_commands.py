"""
Handlers for the ``sip`` command tree.

Every handler is a coroutine taking the parsed ``argparse.Namespace`` and
returning an exit code. Local validation happens before a client is opened;
errors propagate as ``SIPCommandError`` subclasses and are reported by
``lksip.cli.main``.
"""

import logging
import re
from typing import Awaitable, Callable, List, Optional, Type

from google.protobuf.message import Message
from livekit import api
from pydantic import ValidationError

from lksip.environment_config import config
from lksip.services.sip import formatting
from lksip.services.sip.client import DEFAULT_PARTICIPANT_TIMEOUT, SIPClient
from lksip.services.sip.exceptions import InvalidInputError, RemoteError
from lksip.services.sip.payload import read_request_file_or_literal
from lksip.services.sip.resolver import NamespaceFlagReader, resolve
from lksip.services.sip.schemas import DISPATCH_RULE, INBOUND_TRUNK, OUTBOUND_TRUNK, ResourceSchema

logger = logging.getLogger(__name__)

DEFAULT_WAIT_TIMEOUT = 80.0

_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: str) -> float:
    """Parse '80', '80s', '1m30s' or '500ms' into seconds."""
    text = str(value).strip()
    try:
        return float(text)
    except ValueError:
        pass
    pos = 0
    total = 0.0
    for match in _DURATION_RE.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total


def open_sip_client(args) -> SIPClient:
    """Build a client for the project named by --url/--api-key/--api-secret or the environment."""
    try:
        project = config.project(
            url=getattr(args, "url", None),
            api_key=getattr(args, "api_key", None),
            api_secret=getattr(args, "api_secret", None),
        )
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise InvalidInputError(f"incomplete LiveKit project settings ({fields}); set LIVEKIT_URL, LIVEKIT_API_KEY and LIVEKIT_API_SECRET or pass --url/--api-key/--api-secret") from None
    return SIPClient(project)


def read_payloads(payloads: Optional[List[str]], message_type: Type[Message], allow_empty: bool = False) -> List[Message]:
    if not payloads:
        if allow_empty:
            return [message_type()]
        raise InvalidInputError("expected at least one JSON file or JSON literal")
    return [read_request_file_or_literal(payload, message_type) for payload in payloads]


async def _create_each(args, requests: List[Message], create: Callable[[SIPClient, Message], Awaitable[Message]], printer):
    async with open_sip_client(args) as client:
        for request in requests:
            printer(await create(client, request))
    return 0


async def _update(args, schema: ResourceSchema, printer) -> int:
    mutation = resolve(args.id, args.payload or [], NamespaceFlagReader(args), schema)
    logger.debug(f"Resolved {schema.kind} {mutation.resource_id} as {mutation.mode.value}")
    async with open_sip_client(args) as client:
        info = await client.update(schema, mutation)
    printer(info)
    return 0


# Inbound trunks


async def list_inbound_trunks(args):
    """List all inbound SIP trunks"""
    async with open_sip_client(args) as client:
        items = await client.list_inbound_trunks()
    formatting.print_listing(items, formatting.INBOUND_TRUNK_COLUMNS, formatting.inbound_trunk_row, args.json_output)
    return 0


async def create_inbound_trunk(args):
    """Create inbound SIP trunks from JSON requests"""
    requests = read_payloads(args.payloads, api.CreateSIPInboundTrunkRequest)
    return await _create_each(args, requests, lambda client, req: client.create_inbound_trunk(req), formatting.print_trunk_id)


async def update_inbound_trunk(args):
    return await _update(args, INBOUND_TRUNK, formatting.print_trunk_id)


# Outbound trunks


async def list_outbound_trunks(args):
    """List all outbound SIP trunks"""
    async with open_sip_client(args) as client:
        items = await client.list_outbound_trunks()
    formatting.print_listing(items, formatting.OUTBOUND_TRUNK_COLUMNS, formatting.outbound_trunk_row, args.json_output)
    return 0


async def create_outbound_trunk(args):
    requests = read_payloads(args.payloads, api.CreateSIPOutboundTrunkRequest)
    return await _create_each(args, requests, lambda client, req: client.create_outbound_trunk(req), formatting.print_trunk_id)


async def update_outbound_trunk(args):
    return await _update(args, OUTBOUND_TRUNK, formatting.print_trunk_id)


async def delete_trunks(args):
    """Delete SIP trunks (inbound or outbound) by ID"""
    async with open_sip_client(args) as client:
        for trunk_id in args.ids:
            formatting.print_trunk_id(await client.delete_trunk(trunk_id))
    return 0


# Dispatch rules


async def list_dispatch_rules(args):
    async with open_sip_client(args) as client:
        items = await client.list_dispatch_rules()
    formatting.print_listing(items, formatting.DISPATCH_RULE_COLUMNS, formatting.dispatch_rule_row, args.json_output)
    return 0


async def create_dispatch_rule(args):
    requests = read_payloads(args.payloads, api.CreateSIPDispatchRuleRequest)
    return await _create_each(args, requests, lambda client, req: client.create_dispatch_rule(req), formatting.print_dispatch_rule_id)


async def update_dispatch_rule(args):
    return await _update(args, DISPATCH_RULE, formatting.print_dispatch_rule_id)


async def delete_dispatch_rules(args):
    async with open_sip_client(args) as client:
        for rule_id in args.ids:
            formatting.print_dispatch_rule_id(await client.delete_dispatch_rule(rule_id))
    return 0


# Participants


def apply_participant_flags(args, request: Message) -> Message:
    """Let --trunk/--number/--call/--room/--wait override the JSON request, then validate it."""
    if args.trunk:
        request.sip_trunk_id = args.trunk
    if args.number:
        request.sip_number = args.number
    if args.call:
        request.sip_call_to = args.call
    if args.room:
        request.room_name = args.room
    if args.wait:
        request.wait_until_answered = True
    validate_participant_request(request)
    return request


def validate_participant_request(request: Message):
    has_inline_trunk = "trunk" in request.DESCRIPTOR.fields_by_name and request.HasField("trunk")
    if not request.sip_trunk_id and not has_inline_trunk:
        raise InvalidInputError("missing sip trunk id")
    if not request.sip_call_to:
        raise InvalidInputError("missing sip callee number")
    if not request.room_name:
        raise InvalidInputError("missing room name")


def participant_timeout(args, request: Message) -> float:
    """30s by default; --timeout applies only when waiting for the call to be answered."""
    if request.wait_until_answered and args.timeout:
        return args.timeout
    return DEFAULT_PARTICIPANT_TIMEOUT


async def create_sip_participant(args):
    """Dial out and join the callee to a room"""
    requests = [apply_participant_flags(args, req) for req in read_payloads(args.payloads, api.CreateSIPParticipantRequest, allow_empty=True)]

    async def create(client: SIPClient, request: Message) -> Message:
        try:
            return await client.create_sip_participant(request, timeout=participant_timeout(args, request))
        except RemoteError as e:
            formatting.print_sip_status(e)
            raise

    return await _create_each(args, requests, create, formatting.print_participant_info)


async def transfer_sip_participant(args):
    request = api.TransferSIPParticipantRequest(
        room_name=args.room,
        participant_identity=args.identity,
        transfer_to=args.to,
        play_dialtone=args.play_dialtone,
    )
    async with open_sip_client(args) as client:
        await client.transfer_sip_participant(request)
    return 0
