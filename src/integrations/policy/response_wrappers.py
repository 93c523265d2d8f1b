"""
Normalizers for automation-backend responses.

The automation backend has returned, over time and across workflow versions:
plain objects, objects wrapped in ``output``, one-element arrays, and bare
text holding a URL with stray framing. Everything here is pure and never
raises on malformed input, except ``normalize_checkout_response`` which
raises ``UpstreamContractViolation`` when no checkout URL can be recovered.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Callable, Dict, Iterable, Optional, Sequence
from urllib.parse import urlsplit

from src.integrations.contracts.checkout import CheckoutResult
from src.integrations.contracts.generation import (
    DEFAULT_REJECTION_REASON,
    Approved,
    ApprovalVerdict,
    DecisionDetails,
    Rejected,
)
from src.integrations.errors import UpstreamContractViolation

logger = logging.getLogger(__name__)

URL_KEYS = ("url", "URL", "checkout_url", "checkoutUrl")
SESSION_KEYS = ("session_id", "sessionId", "id")
PURCHASE_KEYS = ("purchase_id", "purchaseId")
PURCHASE_CONTAINERS = ("metadata", "metadados")
ERROR_KEYS = ("error", "message")

REASON_KEYS = ("motivo", "reason", "message", "error", "error_message")
APPROVAL_FLAG_KEYS = ("approved", "aprovado", "isApproved", "is_approved", "approval")
REASON_CODE_KEYS = ("reason_code", "reasonCode", "codigo_motivo", "code")
RISK_SCORE_KEYS = ("risk_score", "riskScore", "risco", "risk")
CREATION_ID_KEYS = ("creation_id", "creationId", "criacao_id")

REJECTED_MARKERS = (
    "reprov", "reject", "rejeit", "recus", "negad", "denied", "declin", "disapprov",
    "não aprov", "nao aprov", "not approv", "unapprov",
)
APPROVED_MARKERS = ("aprov", "approv")

TRUTHY_FLAGS = {"true", "1", "yes", "sim", "y", "s", "ok", "approved", "aprovado"}
FALSY_FLAGS = {"false", "0", "no", "nao", "não", "n", "rejected", "reprovado"}

CHECKOUT_PROVIDER_HOSTS = ("checkout.stripe.com",)

_WRAPPED_CHECKOUT = re.compile(r"^.*/checkout/=(\S+)$", re.IGNORECASE)
_HTTPS_SINGLE_SLASH = re.compile(r"^https:/(?!/)", re.IGNORECASE)
_HTTP_SINGLE_SLASH = re.compile(r"^http:/(?!/)", re.IGNORECASE)
_SCHEME = re.compile(r"^https?://", re.IGNORECASE)
_BARE_PROVIDER = re.compile(
    r"^(?:%s)(?:[/?#]|$)" % "|".join(re.escape(h) for h in CHECKOUT_PROVIDER_HOSTS),
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Generic helpers
# ---------------------------------------------------------------------------

def first_present(accessors: Iterable[Callable[[], Any]]) -> Any:
    """Return the first accessor result that is not None and not a blank string."""
    for accessor in accessors:
        value = accessor()
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def as_object(value: Any) -> Optional[Dict[str, Any]]:
    """A dict, or the dict inside a one-element list. Anything else is None."""
    if isinstance(value, dict):
        return value
    if isinstance(value, list) and len(value) == 1 and isinstance(value[0], dict):
        return value[0]
    return None


def pick_string(obj: Optional[Dict[str, Any]], keys: Sequence[str]) -> Optional[str]:
    if not obj:
        return None
    return first_present(
        (lambda k=key: obj[k] if isinstance(obj.get(k), str) else None) for key in keys
    )


def pick_nested_string(
    parent: Optional[Dict[str, Any]], container_key: str, keys: Sequence[str]
) -> Optional[str]:
    if not parent:
        return None
    return pick_string(as_object(parent.get(container_key)), keys)


def _output_of(obj: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not obj:
        return None
    return as_object(obj.get("output"))


# ---------------------------------------------------------------------------
# Checkout URL
# ---------------------------------------------------------------------------

def sanitize_url(raw: Any) -> Optional[str]:
    """
    Recover an absolute http(s) checkout URL from upstream output.

    Order matters: leading ``=`` goes first, then ``/checkout/=`` unwrapping
    (the unwrapped value may still need slash repair), then scheme repairs,
    then the bare provider host, and only then the final scheme check.
    Returns None when nothing usable is left.
    """
    if not isinstance(raw, str):
        return None
    url = raw.strip()
    if not url:
        return None

    url = url.lstrip("=")

    wrapped = _WRAPPED_CHECKOUT.match(url)
    if wrapped:
        url = wrapped.group(1)

    url = _HTTPS_SINGLE_SLASH.sub("https://", url, count=1)
    url = _HTTP_SINGLE_SLASH.sub("http://", url, count=1)

    if _BARE_PROVIDER.match(url):
        url = f"https://{url}"

    if not _SCHEME.match(url):
        return None
    if any(ch.isspace() for ch in url):
        return None
    try:
        if not urlsplit(url).netloc:
            return None
    except ValueError:
        return None
    return url


def normalize_checkout_response(payload: Any, text: Optional[str] = None) -> CheckoutResult:
    """
    Reduce whatever the checkout workflow returned to a CheckoutResult.

    Looks at the object itself, then at its ``output`` object, and as a last
    resort treats the raw body as a bare URL.
    """
    obj = as_object(payload)
    candidates = [c for c in (obj, _output_of(obj)) if c]

    url = first_present(
        (lambda c=c: sanitize_url(pick_string(c, URL_KEYS))) for c in candidates
    )
    if url is None:
        url = sanitize_url(text)
    if url is None and isinstance(payload, str):
        url = sanitize_url(payload)

    if url is None:
        error = first_present((lambda c=c: pick_string(c, ERROR_KEYS)) for c in candidates)
        raise UpstreamContractViolation(
            error or "Missing checkout URL from automation backend",
            payload={"body": payload if payload is not None else text},
        )

    session_id = first_present((lambda c=c: pick_string(c, SESSION_KEYS)) for c in candidates)
    purchase_id = first_present(
        [(lambda c=c: pick_string(c, PURCHASE_KEYS)) for c in candidates]
        + [
            (lambda c=c, k=k: pick_nested_string(c, k, PURCHASE_KEYS))
            for c in candidates
            for k in PURCHASE_CONTAINERS
        ]
    )
    return CheckoutResult(url=url, purchase_id=purchase_id, session_id=session_id)


# ---------------------------------------------------------------------------
# Approval decision
# ---------------------------------------------------------------------------

def _reason_from(obj: Dict[str, Any]) -> str:
    reason = pick_string(obj, REASON_KEYS)
    return reason.strip() if reason else DEFAULT_REJECTION_REASON


def _coerce_flag(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUTHY_FLAGS:
            return True
        if lowered in FALSY_FLAGS:
            return False
    return None


def _verdict_from_status(status: str, obj: Dict[str, Any]) -> Optional[ApprovalVerdict]:
    normalized = status.strip().lower()
    if any(marker in normalized for marker in REJECTED_MARKERS):
        return Rejected(reason=_reason_from(obj))
    if any(marker in normalized for marker in APPROVED_MARKERS):
        return Approved()
    return None


def detect_approval(value: Any) -> Optional[ApprovalVerdict]:
    """
    Find an explicit approve/reject signal, or None when there is none.

    Shapes are tried in a fixed order and the first match wins: the ``output``
    object, a ``status`` string, then a boolean-like approval flag.
    """
    obj = as_object(value)
    if obj is None:
        return None

    nested = _output_of(obj)
    if nested is not None:
        verdict = detect_approval(nested)
        if verdict is not None:
            return verdict

    status = obj.get("status")
    if isinstance(status, str):
        verdict = _verdict_from_status(status, obj)
        if verdict is not None:
            return verdict

    for key in APPROVAL_FLAG_KEYS:
        flag = _coerce_flag(obj.get(key))
        if flag is None:
            continue
        return Approved() if flag else Rejected(reason=_reason_from(obj))

    return None


def parse_approval(value: Any) -> ApprovalVerdict:
    """Like detect_approval, but a missing signal means Approved (fail-open)."""
    verdict = detect_approval(value)
    if verdict is None:
        # Fail-open is current product behaviour; keep it visible in the logs.
        logger.warning("No approval signal in automation response; defaulting to approved")
        return Approved()
    return verdict


def _coerce_score(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        score = float(value)
    elif isinstance(value, str):
        try:
            score = float(value.strip().replace(",", "."))
        except ValueError:
            return None
    else:
        return None
    return score if math.isfinite(score) else None


def extract_decision_details(value: Any) -> DecisionDetails:
    obj = as_object(value)
    if obj is None:
        return DecisionDetails()
    base = _output_of(obj) or obj

    status = base.get("status") if isinstance(base.get("status"), str) else None

    reason_code = first_present(
        (lambda k=key: base.get(k) if isinstance(base.get(k), (str, int)) and not isinstance(base.get(k), bool) else None)
        for key in REASON_CODE_KEYS
    )
    risk_score = first_present((lambda k=key: _coerce_score(base.get(k))) for key in RISK_SCORE_KEYS)

    return DecisionDetails(
        status=status,
        reason_code=str(reason_code) if reason_code is not None else None,
        risk_score=risk_score,
    )


def extract_creation_id(value: Any) -> Optional[str]:
    obj = as_object(value)
    if obj is None:
        return None
    for candidate in (obj, _output_of(obj)):
        if not candidate:
            continue
        found = first_present(
            (lambda k=key: candidate.get(k) if isinstance(candidate.get(k), (str, int)) and not isinstance(candidate.get(k), bool) else None)
            for key in CREATION_ID_KEYS
        )
        if found is not None:
            return str(found).strip()
    return None
