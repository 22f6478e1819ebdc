"""
Response Envelope
-----------------
The uniform {success, data|error, message} shape returned for every
tool call, and its encoding into protocol content.

Exit Criterion: Every tool call produces exactly one envelope.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import json

from mcp.types import TextContent


@dataclass(frozen=True)
class ResponseEnvelope:
    """Result of one tool call."""
    success: bool
    message: str
    data: Optional[Any] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, message: str, data: Optional[Any] = None) -> "ResponseEnvelope":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, error: Optional[str] = None) -> "ResponseEnvelope":
        return cls(success=False, message=message, error=error or message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize, omitting absent data/error."""
        payload: Dict[str, Any] = {"success": self.success}
        if self.data is not None:
            payload["data"] = self.data
        payload["message"] = self.message
        if self.error is not None:
            payload["error"] = self.error
        return payload

    def __repr__(self) -> str:
        status = "✓" if self.success else "✗"
        return f"ResponseEnvelope({status} {self.error or self.message})"


def encode(envelope: ResponseEnvelope) -> str:
    """Encode an envelope as indented JSON text."""
    return json.dumps(envelope.to_dict(), indent=2, ensure_ascii=False, default=str)


def to_content(envelope: ResponseEnvelope) -> List[TextContent]:
    """Encode an envelope as MCP content blocks."""
    return [TextContent(type="text", text=encode(envelope))]
