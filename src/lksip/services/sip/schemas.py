"""
Declarative field schemas for the updatable SIP resources.

Each schema names the protobuf types of one resource kind, its identifier
field, and the fields an ``update`` command can patch from flags. The generic
resolver in ``resolver.py`` walks these schemas; nothing here is specific to
argparse.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Type

from google.protobuf.message import Message
from livekit import api
from livekit.protocol.sip import SIPTransport

from .exceptions import InvalidInputError
from .resolver import Mode, MutationRequest
from .updates import FieldUpdate, Set, SetList

TRANSPORT_PREFIX = "SIP_TRANSPORT_"


def normalize_transport(value: str) -> int:
    """Map 'tcp', 'TCP' or 'SIP_TRANSPORT_TCP' to the SIPTransport enum value."""
    name = value.upper()
    if not name.startswith(TRANSPORT_PREFIX):
        name = TRANSPORT_PREFIX + name
    try:
        return SIPTransport.Value(name)
    except ValueError:
        raise InvalidInputError(f'unsupported transport: "{value}"') from None


@dataclass(frozen=True)
class FieldSpec:
    flag: str
    field_name: str
    is_list: bool = False
    normalize: Optional[Callable[[str], Any]] = None


@dataclass(frozen=True)
class ResourceSchema:
    kind: str
    info_type: Type[Message]
    update_type: Type[Message]
    request_type: Type[Message]
    id_field: str
    fields: Tuple[FieldSpec, ...]

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(spec.field_name for spec in self.fields)

    def build_update(self, patch: Dict[str, FieldUpdate]) -> Message:
        """Turn a patch into the resource's *Update message; ABSENT fields stay unset."""
        update = self.update_type()
        for name, change in patch.items():
            if isinstance(change, SetList):
                list_update = getattr(update, name)
                list_update.SetInParent()
                list_update.set.extend(change.items)
            elif isinstance(change, Set):
                setattr(update, name, change.value)
        return update

    def build_request(self, mutation: MutationRequest) -> Message:
        """Build the UpdateSIP*Request carrying either the replace or the update action."""
        request = self.request_type()
        setattr(request, self.id_field, mutation.resource_id)
        if mutation.mode is Mode.REPLACE:
            action, payload = "replace", mutation.replacement
        else:
            action, payload = "update", self.build_update(mutation.patch)
        target = getattr(request, action)
        target.SetInParent()
        target.MergeFrom(payload)
        return request


INBOUND_TRUNK = ResourceSchema(
    kind="inbound trunk",
    info_type=api.SIPInboundTrunkInfo,
    update_type=api.SIPInboundTrunkUpdate,
    request_type=api.UpdateSIPInboundTrunkRequest,
    id_field="sip_trunk_id",
    fields=(
        FieldSpec("name", "name"),
        FieldSpec("numbers", "numbers", is_list=True),
        FieldSpec("auth-user", "auth_username"),
        FieldSpec("auth-pass", "auth_password"),
    ),
)

OUTBOUND_TRUNK = ResourceSchema(
    kind="outbound trunk",
    info_type=api.SIPOutboundTrunkInfo,
    update_type=api.SIPOutboundTrunkUpdate,
    request_type=api.UpdateSIPOutboundTrunkRequest,
    id_field="sip_trunk_id",
    fields=(
        FieldSpec("name", "name"),
        FieldSpec("address", "address"),
        FieldSpec("transport", "transport", normalize=normalize_transport),
        FieldSpec("numbers", "numbers", is_list=True),
        FieldSpec("auth-user", "auth_username"),
        FieldSpec("auth-pass", "auth_password"),
    ),
)

DISPATCH_RULE = ResourceSchema(
    kind="dispatch rule",
    info_type=api.SIPDispatchRuleInfo,
    update_type=api.SIPDispatchRuleUpdate,
    request_type=api.UpdateSIPDispatchRuleRequest,
    id_field="sip_dispatch_rule_id",
    fields=(
        FieldSpec("name", "name"),
        FieldSpec("trunks", "trunk_ids", is_list=True),
    ),
)
