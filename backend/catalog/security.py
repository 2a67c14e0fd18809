"""Write-access check based on a static API key."""
import hmac
from typing import Optional

from fastapi import Header, Request

from .domain_errors import forbidden, unauthorized

API_KEY_HEADER = "X-API-Key"


class ApiKeyChecker:
    """Require ``X-API-Key`` to match ``settings.API_KEY`` when one is configured."""

    def __call__(
        self,
        request: Request,
        x_api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER),
    ) -> None:
        expected = request.app.state.settings.API_KEY
        if not expected:
            return
        if not x_api_key:
            raise unauthorized("API key required")
        if not hmac.compare_digest(x_api_key.encode("utf-8"), expected.encode("utf-8")):
            raise forbidden("API key is not valid for this action")


require_write_access = ApiKeyChecker()
