# app/schemas/actions.py
from typing import Any, Dict, Optional
from pydantic import BaseModel


class ActionResult(BaseModel):
    """Outcome of one ActionExecutor operation.

    This is what the REST routes translate into responses and what the
    assistant receives as a tool result, so it must stay JSON-serializable.
    """
    action: str
    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    # HTTP status the UI path answers with on failure
    http_status: int = 200

    def tool_payload(self) -> Dict[str, Any]:
        """Compact JSON object fed back to the language model."""
        if self.success:
            return {"success": True, **(self.data or {})}
        payload: Dict[str, Any] = {"success": False, "error": self.error, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload
