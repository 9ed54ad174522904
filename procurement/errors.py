from typing import Any, Dict, Optional


class AppError(Exception):
    """
    Base class for errors that map directly to an HTTP response.
    Rendered as ``{"message": ...}`` by the handlers registered in main.py.
    """
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None,
                 headers: Optional[Dict[str, str]] = None):
        self.message = message or self.default_message
        self.headers = headers
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class AuthError(AppError):
    status_code = 401
    default_message = "Not authenticated"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class RateLimitError(AppError):
    status_code = 429
    default_message = "Too many requests"


class ServerError(AppError):
    status_code = 500
