from typing import Dict

from fastapi import status

from teller_iam.libs.result import Error


class ClientError(Exception):
    """Business failure the caller can act on; rendered with its own status"""

    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.base_error.code, "message": self.base_error.message}


class ServerError(Exception):
    """Unexpected use-case failure; the message never reaches the client"""

    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.base_error.code, "message": "Internal server error"}
