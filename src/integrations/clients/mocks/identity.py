"""
Mock Identity Verifier.

Purpose:
- Resolves bearer tokens from a fixed in-memory table
- Does NOT call the identity provider
- Counts verifications so tests can assert the check ran (or did not)
"""

from __future__ import annotations

from typing import Dict, Optional

from src.integrations.contracts.interfaces import Identity, IdentityVerifier
from src.integrations.errors import Unauthorized


class StaticIdentityVerifier(IdentityVerifier):
    def __init__(self, tokens: Optional[Dict[str, Identity]] = None) -> None:
        self.tokens: Dict[str, Identity] = dict(tokens or {})
        self.calls = 0

    def register(self, token: str, identity: Identity) -> None:
        self.tokens[token] = identity

    async def verify(self, bearer_token: Optional[str]) -> Identity:
        self.calls += 1
        identity = self.tokens.get((bearer_token or "").strip())
        if identity is None:
            raise Unauthorized()
        return identity
