from fastapi import APIRouter, Depends, Request

from src.api.dependencies import bearer_token, get_app_origin, get_checkout_service, read_json_object
from src.integrations.errors import InvalidRequest, Unauthorized
from src.integrations.policy.checkout_service import CheckoutService

api = APIRouter()
checkout_api = api


@api.post("/checkout", tags=["Checkout"])
@api.post("/n8n/billing/checkout", tags=["Checkout"], include_in_schema=False)
async def create_checkout(request: Request, service: CheckoutService = Depends(get_checkout_service)):
    """
    Start a marketplace checkout for one catalog item.

    Returns the provider checkout URL the browser should be sent to.
    """
    token = bearer_token(request)
    if not token:
        raise Unauthorized()

    try:
        body = await read_json_object(request)
    except InvalidRequest:
        # Identity is checked before input; the service reports the missing itemId.
        body = {}
    item_id = body.get("itemId", body.get("musicId"))
    item_id = "" if item_id is None else str(item_id)

    result = await service.create_checkout(token, item_id, get_app_origin(request))
    return result.to_dict()
