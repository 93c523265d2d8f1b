import re
from typing import Any, Dict, Optional

from fastapi import Request

from src.integrations.errors import InvalidRequest
from src.integrations.policy.callback_service import CallbackAuthenticator, PurchaseUpdateService
from src.integrations.policy.checkout_service import CheckoutService
from src.integrations.policy.generation_service import GenerationService

_BEARER = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


def parse_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    if not auth_header:
        return None
    match = _BEARER.match(auth_header.strip())
    if not match:
        return None
    token = match.group(1).strip()
    return token or None


def bearer_token(request: Request) -> Optional[str]:
    return parse_bearer_token(request.headers.get("authorization"))


def _first_forwarded(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    first = value.split(",")[0].strip()
    return first or None


def get_app_origin(request: Request) -> str:
    proto = _first_forwarded(request.headers.get("x-forwarded-proto")) or request.url.scheme
    host = (
        _first_forwarded(request.headers.get("x-forwarded-host"))
        or request.headers.get("host")
        or request.url.netloc
    )
    return f"{proto}://{host}"


async def read_json_object(request: Request) -> Dict[str, Any]:
    """Parse the body as a JSON object; anything else is an InvalidRequest."""
    try:
        body: Any = await request.json()
    except ValueError as e:
        raise InvalidRequest("Invalid JSON body", field="body") from e
    if not isinstance(body, dict):
        raise InvalidRequest("JSON body must be an object", field="body")
    return body


# ---------------------------------------------------------------------------
# Service accessors (built once in create_app, stored on app.state)
# ---------------------------------------------------------------------------

def get_checkout_service(request: Request) -> CheckoutService:
    return request.app.state.checkout_service


def get_generation_service(request: Request) -> GenerationService:
    return request.app.state.generation_service


def get_callback_authenticator(request: Request) -> CallbackAuthenticator:
    return request.app.state.callback_authenticator


def get_purchase_update_service(request: Request) -> PurchaseUpdateService:
    return request.app.state.purchase_update_service
