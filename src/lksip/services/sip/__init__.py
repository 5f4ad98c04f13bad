"""
SIP resource management: request resolution, remote client and output formatting.
"""

from .exceptions import InvalidInputError, PayloadError, RemoteError, SIPCommandError
from .resolver import Mode, MutationRequest, resolve
from .schemas import DISPATCH_RULE, INBOUND_TRUNK, OUTBOUND_TRUNK, FieldSpec, ResourceSchema
from .updates import ABSENT, Absent, FieldUpdate, Set, SetList

__all__ = [
    "SIPCommandError",
    "InvalidInputError",
    "PayloadError",
    "RemoteError",
    "ABSENT",
    "Absent",
    "Set",
    "SetList",
    "FieldUpdate",
    "Mode",
    "MutationRequest",
    "resolve",
    "FieldSpec",
    "ResourceSchema",
    "INBOUND_TRUNK",
    "OUTBOUND_TRUNK",
    "DISPATCH_RULE",
]
