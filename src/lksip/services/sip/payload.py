"""
Read protobuf request payloads given either as a JSON file path or as a JSON literal.
"""

import logging
from pathlib import Path
from typing import Type, TypeVar

from google.protobuf import json_format
from google.protobuf.message import Message

from .exceptions import PayloadError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Message)


def read_payload_text(path_or_literal: str) -> str:
    """Return the JSON text for a file path or a literal starting with '{'."""
    if path_or_literal.lstrip().startswith("{"):
        return path_or_literal
    path = Path(path_or_literal)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise PayloadError(f"{path_or_literal}: {e.strerror or e}") from e


def read_request_file_or_literal(path_or_literal: str, message_type: Type[M]) -> M:
    """
    Parse a JSON payload into a new ``message_type`` instance.

    Field names are accepted in both their proto (snake_case) and JSON
    (lowerCamelCase) spellings. Unknown fields are rejected.
    """
    text = read_payload_text(path_or_literal)
    message = message_type()
    try:
        json_format.Parse(text, message)
    except json_format.ParseError as e:
        raise PayloadError(str(e)) from e
    source = "literal" if text is path_or_literal else path_or_literal
    logger.debug(f"Parsed {message_type.__name__} payload from {source}")
    return message
