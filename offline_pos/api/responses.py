"""
Response envelope shared with the remote HTTP API.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class ApiResponse(BaseModel):
    """Result of a facade call, shaped like the backend's JSON responses."""

    success: bool
    data: Any = None
    # Every facade response is served from the local cache.
    offline: bool = True
    error: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
