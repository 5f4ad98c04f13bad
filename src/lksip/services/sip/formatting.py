"""
Terminal output for SIP resources: tables, JSON listings and identifier lines.
"""

import json
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from google.protobuf import json_format
from google.protobuf.message import Message
from livekit.protocol.sip import SIPMediaEncryption, SIPTransport
from tabulate import tabulate

from .exceptions import RemoteError

# Short names for the SIP status codes a call attempt commonly ends with.
SIP_STATUS_NAMES: Dict[int, str] = {
    100: "Trying",
    180: "Ringing",
    183: "SessionProgress",
    200: "OK",
    400: "BadRequest",
    401: "Unauthorized",
    403: "Forbidden",
    404: "NotFound",
    407: "ProxyAuthRequired",
    408: "RequestTimeout",
    480: "TemporarilyUnavailable",
    481: "CallTransactionDoesNotExists",
    484: "AddressIncomplete",
    486: "BusyHere",
    487: "RequestTerminated",
    488: "NotAcceptableHere",
    500: "InternalServerError",
    501: "NotImplemented",
    502: "BadGateway",
    503: "ServiceUnavailable",
    504: "GatewayTimeout",
    600: "BusyEverywhere",
    603: "Decline",
    604: "DoesNotExistAnywhere",
    606: "NotAcceptable",
}


def sip_status_short_name(code: int) -> str:
    return SIP_STATUS_NAMES.get(code, f"Status{code}")


def user_pass(user: str, has_pass: bool) -> str:
    """Render credentials without revealing the password."""
    if not user and not has_pass:
        return ""
    return f"{user} / {'****' if has_pass else ''}"


def format_headers(headers: Mapping[str, str]) -> str:
    if not headers:
        return ""
    return "\n".join(f"{key}={headers[key]}" for key in sorted(headers))


def format_header_maps(*maps: Mapping[str, str]) -> str:
    blocks = [format_headers(m) for m in maps]
    return "\n\n".join(block for block in blocks if block)


def enum_label(enum_type, value: int, prefix: str) -> str:
    try:
        name = enum_type.Name(value)
    except ValueError:
        return str(value)
    return name[len(prefix) :] if name.startswith(prefix) else name


def transport_label(value: int) -> str:
    return enum_label(SIPTransport, value, "SIP_TRANSPORT_")


def encryption_label(value: int) -> str:
    return enum_label(SIPMediaEncryption, value, "SIP_MEDIA_ENCRYPT_")


INBOUND_TRUNK_COLUMNS = [
    "SipTrunkID",
    "Name",
    "Numbers",
    "AllowedAddresses",
    "AllowedNumbers",
    "Authentication",
    "Encryption",
    "Headers",
    "Metadata",
]


def inbound_trunk_row(item) -> List[str]:
    return [
        item.sip_trunk_id,
        item.name,
        ",".join(item.numbers),
        ",".join(item.allowed_addresses),
        ",".join(item.allowed_numbers),
        user_pass(item.auth_username, item.auth_password != ""),
        encryption_label(item.media_encryption),
        format_header_maps(item.headers, item.headers_to_attributes),
        item.metadata,
    ]


OUTBOUND_TRUNK_COLUMNS = [
    "SipTrunkID",
    "Name",
    "Address",
    "Transport",
    "Numbers",
    "Authentication",
    "Encryption",
    "Headers",
    "Metadata",
]


def outbound_trunk_row(item) -> List[str]:
    return [
        item.sip_trunk_id,
        item.name,
        item.address,
        transport_label(item.transport),
        ",".join(item.numbers),
        user_pass(item.auth_username, item.auth_password != ""),
        encryption_label(item.media_encryption),
        format_header_maps(item.headers, item.headers_to_attributes),
        item.metadata,
    ]


DISPATCH_RULE_COLUMNS = ["SipDispatchRuleID", "Name", "SipTrunks", "Type", "RoomName", "Pin", "Attributes", "Agents"]


def describe_rule(item) -> tuple:
    """Return (type, room pattern, pin) for the rule variant a dispatch rule carries."""
    variant = item.rule.WhichOneof("rule")
    if variant == "dispatch_rule_direct":
        rule = item.rule.dispatch_rule_direct
        return "Direct", rule.room_name, rule.pin
    if variant == "dispatch_rule_individual":
        rule = item.rule.dispatch_rule_individual
        return "Individual (Caller)", rule.room_prefix + "_<caller>_<random>", rule.pin
    if variant == "dispatch_rule_callee":
        rule = item.rule.dispatch_rule_callee
        room = rule.room_prefix + "<callee>"
        if rule.randomize:
            room += "_<random>"
        return "Callee", room, rule.pin
    return "", "", ""


def dispatch_rule_row(item) -> List[str]:
    typ, room, pin = describe_rule(item)
    agents = []
    if item.HasField("room_config"):
        agents = [agent.agent_name for agent in item.room_config.agents]
    return [
        item.sip_dispatch_rule_id,
        item.name,
        ",".join(item.trunk_ids) or "<any>",
        typ,
        room,
        pin,
        ", ".join(f"{key}={item.attributes[key]}" for key in sorted(item.attributes)),
        ",".join(agents),
    ]


def render_table(columns: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    return tabulate(list(rows), headers=list(columns), tablefmt="grid")


def render_json(items: Iterable[Message]) -> str:
    records = [json_format.MessageToDict(item, preserving_proto_field_name=True) for item in items]
    return json.dumps(records, indent=2)


def print_listing(items: Sequence[Message], columns: Sequence[str], row: Callable[[Message], List[str]], as_json: bool = False):
    if as_json:
        print(render_json(items))
        return
    print(render_table(columns, (row(item) for item in items)))


def print_trunk_id(info):
    print(f"SIPTrunkID: {info.sip_trunk_id}")


def print_dispatch_rule_id(info):
    print(f"SIPDispatchRuleID: {info.sip_dispatch_rule_id}")


def print_participant_info(info):
    print(f"SIPCallID: {info.sip_call_id}")
    print(f"ParticipantID: {info.participant_id}")
    print(f"ParticipantIdentity: {info.participant_identity}")
    print(f"RoomName: {info.room_name}")


def print_sip_status(error: RemoteError) -> Optional[int]:
    """Print the SIP status a failed call ended with, if the error carries one."""
    if error.sip_status_code is None:
        return None
    message = error.sip_status or sip_status_short_name(error.sip_status_code)
    print(f"SIPStatusCode: {error.sip_status_code}")
    print(f"SIPStatus: {message}")
    return error.sip_status_code
