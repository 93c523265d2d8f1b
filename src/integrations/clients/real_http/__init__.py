"""
Real HTTP integration clients.

These clients talk to the systems around the gateway:
- n8n webhooks (checkout, creations) via RealAutomationClient
- Supabase Auth (end-user identity) via SupabaseIdentityVerifier

Important:
- Must implement the same interfaces as the mock clients
- Must return data shaped according to src/integrations/contracts/*

Switching:
The selection of mock vs real clients happens in src/api/main.py only.
"""

from .automation import RealAutomationClient
from .supabase_auth import SupabaseIdentityVerifier

__all__ = ["RealAutomationClient", "SupabaseIdentityVerifier"]
