"""
Generation approval service.

Forwards a creative prompt (or lyrics) to the automation backend, which
moderates it and either approves or rejects creation. Creation records are
written by the automation backend itself; nothing is persisted here.
"""

from __future__ import annotations

import logging
from typing import Optional

from src.integrations.contracts.generation import (
    GenerationOutcome,
    GenerationRequest,
    Rejected,
    build_generation_payload,
    validate_generation_request,
)
from src.integrations.contracts.interfaces import (
    AutomationClient,
    GenerationMode,
    IdentityVerifier,
)
from src.integrations.errors import InvalidRequest, Misconfigured, Unauthorized, UpstreamError
from src.integrations.policy.response_wrappers import (
    extract_creation_id,
    extract_decision_details,
    parse_approval,
)
from src.utils.config_loader import GatewaySettings

logger = logging.getLogger(__name__)


def pick_generation_webhook_url(settings: GatewaySettings, mode: GenerationMode) -> Optional[str]:
    """
    Resolve the creations webhook for a mode.

    A single shared URL wins (mode travels in the payload). Otherwise the
    mode-specific URL, then its legacy alias, then the legacy single URL.
    """
    if settings.creations_webhook_url:
        return settings.creations_webhook_url

    if mode is GenerationMode.LYRICS:
        chain = (
            settings.creations_webhook_with_lyrics_url,
            settings.legacy_with_lyrics_url,
            settings.legacy_webhook_url,
        )
    else:
        chain = (
            settings.creations_webhook_no_lyrics_url,
            settings.legacy_no_lyrics_url,
            settings.legacy_webhook_url,
        )
    for url in chain:
        if url:
            return url
    return None


class GenerationService:
    def __init__(
        self,
        settings: GatewaySettings,
        identity_verifier: IdentityVerifier,
        automation_client: AutomationClient,
    ) -> None:
        self.settings = settings
        self.identity_verifier = identity_verifier
        self.automation_client = automation_client

    async def submit_generation(
        self, bearer_token: Optional[str], request: GenerationRequest
    ) -> GenerationOutcome:
        if not bearer_token:
            raise Unauthorized()
        identity = await self.identity_verifier.verify(bearer_token)

        errors = validate_generation_request(request)
        if errors:
            field, message = errors[0]
            raise InvalidRequest(
                message,
                field=field,
                payload={"errors": [{"field": f, "message": m} for f, m in errors]},
            )

        webhook_url = pick_generation_webhook_url(self.settings, request.mode)
        if not webhook_url:
            logger.error("generation: no creations webhook URL configured for mode=%s", request.mode.value)
            raise Misconfigured("Missing creations webhook URL")

        payload = build_generation_payload(request, identity=identity, source=self.settings.request_source)

        logger.info("Submitting generation '%s' (mode=%s, user %s)", payload["title"], request.mode.value, identity.id)
        reply = await self.automation_client.post_json(
            webhook_url,
            payload,
            bearer_token=self.settings.creations_webhook_secret or None,
            timeout_seconds=self.settings.creations_timeout_seconds,
        )

        if not reply.ok:
            logger.error("Creations webhook error: status=%s body=%s", reply.status, reply.text)
            raise UpstreamError("Creations webhook returned an error", status=reply.status, body=reply.text)

        upstream = reply.json
        outcome = GenerationOutcome(
            verdict=parse_approval(upstream),
            details=extract_decision_details(upstream),
            creation_id=extract_creation_id(upstream),
            upstream=reply.body,
        )
        if isinstance(outcome.verdict, Rejected):
            logger.info("Generation rejected: %s (status=%s)", outcome.verdict.reason, outcome.details.status)
        return outcome
