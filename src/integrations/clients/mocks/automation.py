"""
Mock Automation Client.

Purpose:
- Stands in for the n8n webhooks during development/testing
- Does NOT make any network calls
- Replays scripted replies (JSON, wrapped JSON, arrays, plain text, errors)
  and records every outbound call for inspection

Swap:
Replace with clients/real_http/automation.py when webhook URLs are configured.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from src.integrations.contracts.interfaces import AutomationClient, UpstreamReply
from src.integrations.errors import UpstreamUnreachable


@dataclass
class RecordedCall:
    url: str
    payload: Dict[str, Any]
    bearer_token: Optional[str]
    timeout_seconds: float


@dataclass
class MockAutomationClient(AutomationClient):
    replies: List[Union[UpstreamReply, Exception]] = field(default_factory=list)
    calls: List[RecordedCall] = field(default_factory=list)

    def queue_json(self, body: Any, status: int = 200) -> "MockAutomationClient":
        text = json.dumps(body, ensure_ascii=False)
        self.replies.append(
            UpstreamReply(ok=200 <= status < 300, status=status, text=text, json=body, content_type="application/json")
        )
        return self

    def queue_text(self, text: str, status: int = 200) -> "MockAutomationClient":
        self.replies.append(
            UpstreamReply(ok=200 <= status < 300, status=status, text=text, json=None, content_type="text/plain")
        )
        return self

    def queue_unreachable(self) -> "MockAutomationClient":
        self.replies.append(UpstreamUnreachable("Failed to reach automation backend"))
        return self

    async def post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        *,
        bearer_token: Optional[str] = None,
        timeout_seconds: float = 15.0,
    ) -> UpstreamReply:
        self.calls.append(RecordedCall(url, payload, bearer_token, timeout_seconds))
        if not self.replies:
            return UpstreamReply(ok=True, status=200, text="", json=None)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply
