import json
from typing import Any, NamedTuple, Optional


class HttpResponse(NamedTuple):
    """Response from a call to the remote config service."""
    status_code: int
    text: str
    content_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def not_modified(self) -> bool:
        return self.status_code == 304

    def json(self) -> Any:
        return json.loads(self.text) if self.text else None
