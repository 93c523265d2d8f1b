"""
Purchase callback contract.

The automation backend reports checkout progress by posting a partial
update for one purchase. Only the fields it actually sends are written.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .interfaces import PurchaseStatus

PATCHABLE_FIELDS = ("stripe_session_id", "stripe_payment_intent_id", "error_message")


class InboundPurchaseUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    purchase_id: str
    status: Optional[str] = PurchaseStatus.COMPLETED.value
    stripe_session_id: Optional[str] = None
    stripe_payment_intent_id: Optional[str] = None
    error_message: Optional[str] = None

    @field_validator("purchase_id", mode="before")
    @classmethod
    def _purchase_id_not_blank(cls, value: Any) -> str:
        text = "" if value is None else str(value).strip()
        if not text:
            raise ValueError("purchase_id is required")
        return text

    def to_patch(self) -> Dict[str, Any]:
        """Status always, the rest only when present in the body (null included)."""
        patch: Dict[str, Any] = {"status": self.status or PurchaseStatus.COMPLETED.value}
        for name in PATCHABLE_FIELDS:
            if name in self.model_fields_set:
                patch[name] = getattr(self, name)
        return patch
