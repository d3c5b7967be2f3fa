from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class TrackerError(HTTPException):
    """Base for errors rendered as ``{"success": false, "error": ...}``."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, headers: Optional[Dict[str, str]] = None, **extra: Any):
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)
        self.extra = extra

    def to_content(self) -> Dict[str, Any]:
        return {"success": False, "error": self.detail, **self.extra}


class ValidationError(TrackerError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, fields: Optional[List[str]] = None):
        super().__init__(detail, fields=fields or [])


class AuthError(TrackerError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredentials(AuthError):
    def __init__(self):
        super().__init__("Invalid credentials")


class InvalidToken(AuthError):
    def __init__(self):
        super().__init__("Invalid refresh token")


class TokenNotFound(AuthError):
    def __init__(self):
        super().__init__("Refresh token not found")


class TokenExpired(AuthError):
    def __init__(self):
        super().__init__("Refresh token expired")


class ForbiddenError(TrackerError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(TrackerError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(TrackerError):
    status_code = status.HTTP_409_CONFLICT


class MissingUsernameError(TrackerError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, platform_label: str):
        super().__init__(f"{platform_label} username not set. Please add it in your profile first.")


class UpstreamUnavailableError(TrackerError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, detail: str):
        super().__init__(detail, suggestion="The platform API is currently unavailable. Please try again later.")


class RateLimitError(TrackerError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
