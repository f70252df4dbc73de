"""
API Key Gate

Protects write endpoints with a single static shared secret sent in the
x-api-key header. The key comes from configuration when the app is built;
with no key configured the gate lets every request through.
"""
import hmac
import logging
from typing import Optional

from fastapi import Header, Request

from .exceptions import AuthenticationRequiredError, InvalidApiKeyError

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"


class ApiKeyGate:
    """
    Static API key check.

    States:
    - api_key is None: open, every request passes
    - header missing: AuthenticationRequiredError (401)
    - header present but different: InvalidApiKeyError (403)
    """

    def __init__(self, api_key: Optional[str]):
        self.api_key = api_key or None
        if self.api_key is None:
            logger.warning("API_KEY not set - authentication disabled for write endpoints")

    @property
    def enabled(self) -> bool:
        return self.api_key is not None

    def check(self, provided: Optional[str]) -> None:
        """
        Verify the key sent by a client.

        Raises:
            AuthenticationRequiredError: Key configured, none provided
            InvalidApiKeyError: Key configured, provided key differs
        """
        if not self.enabled:
            return

        if not provided:
            raise AuthenticationRequiredError()

        # Constant-time comparison of the exact strings
        if not hmac.compare_digest(provided.encode("utf-8"), self.api_key.encode("utf-8")):
            raise InvalidApiKeyError()


async def require_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(None, alias=API_KEY_HEADER)
) -> None:
    """FastAPI dependency running the app's ApiKeyGate on the request."""
    request.app.state.api_key_gate.check(x_api_key)
