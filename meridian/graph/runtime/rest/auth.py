"""Bearer credential contract.

Token acquisition lives outside this package; the executor only needs
something that can hand out an access token per request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class AccessToken:
    """Access token plus its scheme."""

    access_token: str
    token_type: str = "Bearer"

    def auth_header(self) -> str:
        """Value of the Authorization header."""
        return f"{self.token_type} {self.access_token}"


class Authorizer(Protocol):
    """Anything that can provide an access token with which to authorize requests."""

    async def token(self) -> AccessToken: ...


class StaticTokenAuthorizer:
    """Authorizer returning a pre-acquired token, e.g. from the Azure CLI."""

    def __init__(self, access_token: str, token_type: str = "Bearer") -> None:
        if not access_token:
            raise ValueError("access_token must be a non-empty string")
        self._token = AccessToken(access_token=access_token, token_type=token_type)

    async def token(self) -> AccessToken:
        return self._token
