"""
Update resolution for SIP resources.

An ``update`` command either replaces a resource wholesale from a JSON payload
or patches individual fields from flags. ``resolve`` decides which, validates
the identifier, and returns a single ``MutationRequest``. It performs no remote
calls and no logging; every failure is an ``InvalidInputError`` (or a
``PayloadError`` from the payload reader) raised before anything is sent.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Protocol, Sequence

from google.protobuf.message import Message

from .exceptions import InvalidInputError
from .payload import read_request_file_or_literal
from .updates import ABSENT, FieldUpdate, Set, SetList

if TYPE_CHECKING:
    from .schemas import ResourceSchema


class Mode(str, Enum):
    REPLACE = "replace"
    UPDATE = "update"


class FlagReader(Protocol):
    """Read access to the flags of one command invocation."""

    def is_set(self, name: str) -> bool: ...

    def string(self, name: str) -> str: ...

    def string_list(self, name: str) -> List[str]: ...


class NamespaceFlagReader:
    """
    FlagReader over an ``argparse.Namespace``.

    Flags are addressed by their command-line name (``auth-user``). A flag that
    argparse left at ``None`` was not supplied. List flags are repeatable and
    each occurrence may hold comma-separated values.
    """

    def __init__(self, args):
        self._args = args

    def _raw(self, name: str):
        return getattr(self._args, name.replace("-", "_"), None)

    def is_set(self, name: str) -> bool:
        return self._raw(name) is not None

    def string(self, name: str) -> str:
        value = self._raw(name)
        return "" if value is None else str(value)

    def string_list(self, name: str) -> List[str]:
        values = self._raw(name)
        if values is None:
            return []
        if isinstance(values, str):
            values = [values]
        collected: List[str] = []
        for value in values:
            collected.extend(part.strip() for part in str(value).split(","))
        return collected


@dataclass
class MutationRequest:
    """One resolved update: either a full replacement or a sparse patch."""

    resource_id: str
    mode: Mode
    replacement: Optional[Message] = None
    patch: Optional[Dict[str, FieldUpdate]] = field(default=None)

    def __post_init__(self):
        if not self.resource_id:
            raise InvalidInputError("no ID specified")
        if self.mode is Mode.REPLACE and (self.replacement is None or self.patch is not None):
            raise ValueError("replace mutation requires a replacement and no patch")
        if self.mode is Mode.UPDATE and (self.patch is None or self.replacement is not None):
            raise ValueError("update mutation requires a patch and no replacement")


def list_update_from_flag(flags: FlagReader, name: str) -> FieldUpdate:
    """An unset flag is ABSENT; a single empty value clears the list."""
    if not flags.is_set(name):
        return ABSENT
    values = flags.string_list(name)
    if len(values) == 1 and values[0] == "":
        return SetList(())
    return SetList(values)


def resolve(
    id_flag: Optional[str],
    positional_args: Sequence[str],
    flags: FlagReader,
    schema: "ResourceSchema",
    read_payload: Callable[[str, Any], Message] = read_request_file_or_literal,
) -> MutationRequest:
    if len(positional_args) > 1:
        raise InvalidInputError("expected one JSON file or flags")

    resource_id = id_flag or ""

    if len(positional_args) == 1:
        replacement = read_payload(positional_args[0], schema.info_type)
        if not resource_id:
            resource_id = getattr(replacement, schema.id_field)
        setattr(replacement, schema.id_field, "")
        if not resource_id:
            raise InvalidInputError("no ID specified, use flag or set it in JSON")
        return MutationRequest(resource_id=resource_id, mode=Mode.REPLACE, replacement=replacement)

    if not resource_id:
        raise InvalidInputError("no ID specified")

    patch: Dict[str, FieldUpdate] = {}
    for spec in schema.fields:
        if spec.is_list:
            patch[spec.field_name] = list_update_from_flag(flags, spec.flag)
            continue
        value = flags.string(spec.flag)
        if not value:
            patch[spec.field_name] = ABSENT
        elif spec.normalize is not None:
            patch[spec.field_name] = Set(spec.normalize(value))
        else:
            patch[spec.field_name] = Set(value)
    return MutationRequest(resource_id=resource_id, mode=Mode.UPDATE, patch=patch)
