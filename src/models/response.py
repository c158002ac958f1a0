"""Uniform response envelope returned to API callers."""

import json
from typing import Any, Dict, Optional

from pydantic import BaseModel

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
}


class Envelope(BaseModel):
    """Success/failure outcome of one request."""

    status_code: int
    success: bool
    data: Optional[Any] = None
    count: Optional[int] = None
    error: Optional[str] = None
    details: Optional[str] = None

    @classmethod
    def ok(cls, status_code: int, data: Any, count: Optional[int] = None) -> "Envelope":
        return cls(status_code=status_code, success=True, data=data, count=count)

    @classmethod
    def failure(
        cls, status_code: int, error: str, details: Optional[str] = None
    ) -> "Envelope":
        return cls(status_code=status_code, success=False, error=error, details=details)

    def body(self) -> Dict[str, Any]:
        """JSON body: data on success, error (and details) on failure."""
        body: Dict[str, Any] = {"success": self.success}
        if self.success:
            body["data"] = self.data
            if self.count is not None:
                body["count"] = self.count
        else:
            body["error"] = self.error
            if self.details is not None:
                body["details"] = self.details
        return body

    def to_lambda_response(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """Format as an API Gateway proxy response with CORS headers."""
        return {
            "statusCode": self.status_code,
            "headers": dict(headers or CORS_HEADERS),
            "body": json.dumps(self.body(), default=str),
        }
