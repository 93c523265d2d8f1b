"""
Generation contract: request shape, approval verdict and decision details
for the content-generation approval flow.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from .interfaces import GenerationMode, Identity

DEFAULT_REJECTION_REASON = "Não aprovado"
APPROVED_STATUS = "aprovado"
REJECTED_STATUS = "reprovado"


# ---------------------------------------------------------------------------
# Approval verdict
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Approved:
    approved = True


@dataclass(frozen=True)
class Rejected:
    reason: str
    approved = False


ApprovalVerdict = Union[Approved, Rejected]


@dataclass(frozen=True)
class DecisionDetails:
    """Best-effort diagnostics reported by the moderation step."""
    status: Optional[str] = None
    reason_code: Optional[str] = None
    risk_score: Optional[float] = None


# ---------------------------------------------------------------------------
# Request / outcome
# ---------------------------------------------------------------------------

@dataclass
class GenerationRequest:
    title: str
    mode: Optional[GenerationMode]       # None when the client sent an unknown mode
    theme: str
    inspiration_prompt: Optional[str] = None
    lyrics: Optional[str] = None

    @property
    def creative_text(self) -> Optional[str]:
        if self.mode is GenerationMode.LYRICS:
            return self.lyrics
        return self.inspiration_prompt


@dataclass
class GenerationOutcome:
    verdict: ApprovalVerdict
    details: DecisionDetails = field(default_factory=DecisionDetails)
    creation_id: Optional[str] = None
    upstream: Any = None

    @property
    def approved(self) -> bool:
        return isinstance(self.verdict, Approved)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "creation_id": self.creation_id,
            "approved": self.approved,
        }
        if isinstance(self.verdict, Rejected):
            body["reason"] = self.verdict.reason
            body["status"] = self.details.status or REJECTED_STATUS
        else:
            body["status"] = self.details.status or APPROVED_STATUS
        body["reason_code"] = self.details.reason_code
        body["risk_score"] = self.details.risk_score
        body["upstream"] = self.upstream
        return body


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def parse_mode(value: Any) -> Optional[GenerationMode]:
    """Map a client-supplied mode; absent means inspiration, unknown is None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return GenerationMode.INSPIRATION
    try:
        return GenerationMode(str(value).strip().lower())
    except ValueError:
        return None


def validate_generation_request(request: GenerationRequest) -> List[Tuple[str, str]]:
    """
    Return (field, message) pairs.
    Empty list means the request is valid.
    """
    errors: List[Tuple[str, str]] = []

    if request.mode is None:
        errors.append(("mode", "mode must be 'inspiration' or 'lyrics'"))
        return errors
    if not (request.title or "").strip():
        errors.append(("title", "title is required"))
    if not (request.theme or "").strip():
        errors.append(("theme", "theme is required"))

    if request.mode is GenerationMode.LYRICS:
        if not (request.lyrics or "").strip():
            errors.append(("lyrics", "lyrics is required when mode=lyrics"))
    elif not (request.inspiration_prompt or "").strip():
        errors.append(("inspiration_prompt", "inspiration_prompt is required when mode=inspiration"))

    return errors


def build_generation_payload(
    request: GenerationRequest,
    *,
    identity: Identity,
    source: str,
    created_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    lyrics_mode = request.mode is GenerationMode.LYRICS
    text = (request.creative_text or "").strip()
    created = created_at or datetime.now(timezone.utc)
    return {
        "title": request.title.strip(),
        "mode": request.mode.value,
        "input_type": "lyrics" if lyrics_mode else "prompt",
        "has_lyrics": lyrics_mode,
        "theme": request.theme.strip(),
        "inspiration_prompt": None if lyrics_mode else text,
        "lyrics": text if lyrics_mode else None,
        "user": {"id": identity.id, "email": identity.email},
        "source": source,
        "created_at": created.isoformat(),
    }
