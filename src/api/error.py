from typing import Dict, Optional

from fastapi import status
from src.libs.result import Error


class ClientError(Exception):
    """Business error rendered as {"error": {code, message}} with a 4xx status"""

    def __init__(
        self,
        base_error: Error,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.base_error = base_error
        self.status_code = status_code
        self.headers = headers
        if headers is None and status_code == status.HTTP_401_UNAUTHORIZED:
            self.headers = {"WWW-Authenticate": "Bearer"}
        super().__init__(base_error.message)


class ServerError(Exception):
    """Unexpected failure; the message is logged, never returned to the client"""

    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)
