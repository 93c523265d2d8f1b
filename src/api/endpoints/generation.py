from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.api.dependencies import bearer_token, get_generation_service, read_json_object
from src.integrations.contracts.generation import GenerationRequest, parse_mode
from src.integrations.errors import InvalidRequest, Unauthorized
from src.integrations.policy.generation_service import GenerationService

router = APIRouter()


def _text(body: Dict[str, Any], key: str) -> Optional[str]:
    value = body.get(key)
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value).strip()


@router.post("/generation", tags=["Generation"])
@router.post("/n8n/creations/webhook", tags=["Generation"], include_in_schema=False)
async def submit_generation(request: Request, service: GenerationService = Depends(get_generation_service)):
    """
    Submit a creation for moderation by the automation backend.

    200 when approved, 422 when the backend rejected the content.
    """
    token = bearer_token(request)
    if not token:
        raise Unauthorized()

    try:
        body = await read_json_object(request)
    except InvalidRequest:
        body = None

    if body is None:
        # Resolve identity first so an anonymous caller never learns about body errors.
        await service.identity_verifier.verify(token)
        raise InvalidRequest("Invalid JSON body", field="body")

    generation = GenerationRequest(
        title=_text(body, "title") or "",
        mode=parse_mode(body.get("mode")),
        theme=_text(body, "theme") or "",
        inspiration_prompt=_text(body, "inspiration_prompt"),
        lyrics=_text(body, "lyrics"),
    )
    outcome = await service.submit_generation(token, generation)
    return JSONResponse(status_code=200 if outcome.approved else 422, content=outcome.to_dict())


@router.post("/n8n/creations/complete", tags=["Generation"], include_in_schema=False)
async def creations_complete_deprecated():
    return JSONResponse(
        status_code=410,
        content={
            "error": "Deprecated endpoint",
            "message": "This endpoint is disabled. The automation backend writes creation and music records directly.",
        },
    )
