"""
Integrations layer.
This package contains all code used to communicate with the systems around the gateway:
- the n8n automation backend (checkout sessions, content moderation)
- Supabase Auth (end-user identity)
- the marketplace data store (catalog prices, purchase status)

Key rule:
- HTTP endpoints MUST NOT call external systems directly.
- Endpoints call services in src/integrations/policy, which call integration clients.
- We use MOCK clients during development and tests and REAL_HTTP clients when configured.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (src/api/main.py).
"""

from .contracts.interfaces import (
    AutomationClient,
    CatalogItem,
    GenerationMode,
    Identity,
    IdentityVerifier,
    MarketplaceStore,
    PurchaseStatus,
    UpstreamReply,
)
from .contracts.checkout import CheckoutResult, build_checkout_payload
from .contracts.generation import (
    Approved,
    ApprovalVerdict,
    DecisionDetails,
    GenerationOutcome,
    GenerationRequest,
    Rejected,
)
from .contracts.purchases import InboundPurchaseUpdate
from .errors import (
    GatewayError,
    InvalidRequest,
    InvalidState,
    Misconfigured,
    NotFound,
    PersistenceError,
    Unauthorized,
    UpstreamContractViolation,
    UpstreamError,
    UpstreamUnreachable,
)

__all__ = [
    # interfaces
    "AutomationClient", "CatalogItem", "GenerationMode", "Identity",
    "IdentityVerifier", "MarketplaceStore", "PurchaseStatus",
    "UpstreamReply",
    # checkout
    "CheckoutResult", "build_checkout_payload",
    # generation
    "Approved", "ApprovalVerdict", "DecisionDetails", "GenerationOutcome",
    "GenerationRequest", "Rejected",
    # purchases
    "InboundPurchaseUpdate",
    # errors
    "GatewayError", "InvalidRequest", "InvalidState", "Misconfigured", "NotFound",
    "PersistenceError", "Unauthorized", "UpstreamContractViolation", "UpstreamError",
    "UpstreamUnreachable",
]
