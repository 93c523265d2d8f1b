from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from src.api.dependencies import (
    bearer_token,
    get_callback_authenticator,
    get_purchase_update_service,
    read_json_object,
)
from src.integrations.contracts.purchases import InboundPurchaseUpdate
from src.integrations.errors import InvalidRequest
from src.integrations.policy.callback_service import CallbackAuthenticator, PurchaseUpdateService

router = APIRouter()


@router.post("/purchases/callback", tags=["Purchases"])
@router.post("/n8n/purchases/update", tags=["Purchases"], include_in_schema=False)
async def purchase_callback(
    request: Request,
    authenticator: CallbackAuthenticator = Depends(get_callback_authenticator),
    service: PurchaseUpdateService = Depends(get_purchase_update_service),
):
    """
    Automation backend -> gateway: patch a purchase's status.

    Authenticated with the shared secret, not with an end-user token.
    """
    authenticator.authenticate(bearer_token(request))

    body = await read_json_object(request)
    try:
        update = InboundPurchaseUpdate.model_validate(body)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ())) or None
        message = "purchase_id is required" if field == "purchase_id" else "Invalid purchase update"
        raise InvalidRequest(message, field=field) from e

    purchase = await service.apply(update)
    return {"ok": True, "purchase": purchase}
