"""Access gate delegating token validation to an external oracle."""

import asyncio
import json
from dataclasses import dataclass
from typing import Optional

import aiohttp
import structlog

from ..config.settings import settings
from ..exceptions import AccessDenied, AuthServiceUnavailable

logger = structlog.get_logger()


@dataclass(frozen=True)
class AccessToken:
    value: str = ""


def extract_token(raw_body: bytes) -> AccessToken:
    """Pull `Token` out of a JSON request body.

    Anything unusable (empty body, invalid JSON, wrong types) yields an empty
    token; the oracle is the one that rejects it.
    """
    if not raw_body:
        return AccessToken()
    try:
        data = json.loads(raw_body)
    except ValueError:
        return AccessToken()
    if not isinstance(data, dict):
        return AccessToken()
    value = data.get("Token")
    return AccessToken(value=value if isinstance(value, str) else "")


class AccessGate:
    """Asks the token oracle whether a request may proceed."""

    def __init__(self, auth_url: str = None, timeout: float = None):
        self.auth_url = auth_url or settings.auth_url
        self.timeout = timeout or settings.auth_timeout_seconds
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )
        return self

    async def __aexit__(self, *args):
        if self.session:
            await self.session.close()
            self.session = None

    async def authorize(self, raw_body: bytes) -> bool:
        """True only when the oracle answers 200 for the body's token.

        Raises AuthServiceUnavailable if the oracle cannot be reached.
        """
        token = extract_token(raw_body)
        status = await self._check_token(token)
        allowed = status == 200
        if not allowed:
            logger.info("access_denied", oracle_status=status, empty_token=not token.value)
        return allowed

    async def require(self, raw_body: bytes) -> None:
        if not await self.authorize(raw_body):
            raise AccessDenied("Token rejected")

    async def _check_token(self, token: AccessToken) -> int:
        if self.session is None:
            raise RuntimeError("AccessGate must be used as an async context manager")
        try:
            async with self.session.post(self.auth_url, json={"Token": token.value}) as response:
                return response.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("auth_oracle_unreachable", url=self.auth_url, error=str(e) or type(e).__name__)
            raise AuthServiceUnavailable(f"Token oracle unreachable: {self.auth_url}") from e
