"""
Environment configuration for lksip.
Resolves the LiveKit server URL and API credentials from the environment (and .env file).
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()


def to_api_url(url: str) -> str:
    """Use the HTTP scheme the server API expects for a ws(s):// or bare host URL."""
    url = (url or "").strip()
    if url.startswith("ws://"):
        url = "http://" + url[len("ws://") :]
    elif url.startswith("wss://"):
        url = "https://" + url[len("wss://") :]
    elif url and "://" not in url:
        url = "https://" + url
    return url.rstrip("/")


class LiveKitProject(BaseModel):
    """Connection details for one LiveKit project."""

    url: str = Field(..., description="LiveKit server URL (http(s) or ws(s))")
    api_key: str = Field(..., description="API key")
    api_secret: str = Field(..., description="API secret")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        """Require a URL and use the HTTP scheme the server API expects."""
        v = to_api_url(v)
        if not v:
            raise ValueError("LiveKit URL cannot be empty")
        return v

    @field_validator("api_key", "api_secret")
    @classmethod
    def validate_credential(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("API key and secret cannot be empty")
        return v


class EnvironmentConfig:
    """Configuration manager loading variables from .env file"""

    def __init__(self):
        self._setup_livekit()

    def _setup_livekit(self):
        """Load LiveKit settings from environment variables"""
        self.livekit_url = os.getenv("LIVEKIT_URL", "http://localhost:7880")
        self.livekit_api_key = os.getenv("LIVEKIT_API_KEY", "devkey")
        self.livekit_api_secret = os.getenv("LIVEKIT_API_SECRET", "secret")

    def project(self, url: Optional[str] = None, api_key: Optional[str] = None, api_secret: Optional[str] = None) -> LiveKitProject:
        """
        Resolve the project to talk to.

        Explicit arguments (usually CLI flags) win over the environment.
        Raises pydantic.ValidationError when the result is incomplete.
        """
        return LiveKitProject(
            url=url or self.livekit_url,
            api_key=api_key or self.livekit_api_key,
            api_secret=api_secret or self.livekit_api_secret,
        )


# Global configuration instance
config = EnvironmentConfig()
