"""
Mock integration clients.

These clients return fake (but realistic) responses without calling any external API.
They are used when:
- n8n webhooks or Supabase are not available locally
- We want to exercise the gateway end-to-end in tests

Important:
- Mock clients must follow the SAME interface as real HTTP clients.
- Mock clients should return data shaped according to src/integrations/contracts/*

Switching to real:
The selection of mock vs real clients happens in src/api/main.py.
"""

from .automation import MockAutomationClient, RecordedCall
from .identity import StaticIdentityVerifier

__all__ = ["MockAutomationClient", "RecordedCall", "StaticIdentityVerifier"]
