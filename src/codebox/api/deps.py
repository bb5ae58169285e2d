from __future__ import annotations

import hmac
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)


class BearerTokenAuth:
    """Accept callers presenting one of the configured bearer tokens.

    With no tokens configured every caller is accepted.

    Example:
        ```python
        require_collaborator = BearerTokenAuth(["secret"])
        ```
    """

    def __init__(self, tokens: list[str]) -> None:
        self._tokens = [token.encode("utf-8") for token in tokens]
        if not self._tokens:
            logger.warning("No api_tokens configured; execution endpoint is unauthenticated")

    def __call__(self, creds: HTTPAuthorizationCredentials | None = Depends(bearer)) -> None:
        if not self._tokens:
            return
        if creds is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
        presented = creds.credentials.encode("utf-8")
        if not any(hmac.compare_digest(presented, token) for token in self._tokens):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
