"""
Custom exceptions for SIP management commands.
"""

from typing import Dict, Optional


class SIPCommandError(Exception):
    """Base exception for SIP command errors."""

    pass


class InvalidInputError(SIPCommandError):
    """Raised when flags or arguments fail local validation."""

    pass


class PayloadError(SIPCommandError):
    """Raised when a JSON request payload cannot be read or parsed."""

    def __init__(self, message: str):
        super().__init__(f"could not read request: {message}")


class RemoteError(SIPCommandError):
    """Raised when the LiveKit SIP service rejects or fails a request."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status: Optional[int] = None,
        sip_status_code: Optional[int] = None,
        sip_status: Optional[str] = None,
    ):
        self.message = message
        self.code = code
        self.status = status
        self.sip_status_code = sip_status_code
        self.sip_status = sip_status
        if code:
            super().__init__(f"{code}: {message}")
        else:
            super().__init__(message)

    @classmethod
    def from_twirp(cls, error) -> "RemoteError":
        """Build from a livekit.api.TwirpError, keeping any SIP status it carries."""
        metadata: Dict[str, str] = dict(getattr(error, "metadata", None) or {})
        sip_status_code = None
        raw_code = metadata.get("sip_status_code")
        if raw_code:
            try:
                sip_status_code = int(raw_code)
            except ValueError:
                sip_status_code = None
        return cls(
            error.message,
            code=error.code,
            status=getattr(error, "status", None),
            sip_status_code=sip_status_code,
            sip_status=metadata.get("sip_status") or None,
        )
