"""
API error taxonomy

Every error is an HTTPException so handlers can simply raise; the app turns
them into the ``{"success": false, "message": ...}`` envelope.
"""

from fastapi import HTTPException


class ApiError(HTTPException):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None):
        super().__init__(status_code=self.status_code, detail=message or self.default_message)


class ValidationError(ApiError):
    status_code = 400
    default_message = "Missing required fields"


class ConflictError(ApiError):
    status_code = 400
    default_message = "Already exists"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class AuthError(ApiError):
    status_code = 401
    default_message = "Incorrect password"


class UploadError(ApiError):
    status_code = 500
    default_message = "Failed to upload property"


class ServerError(ApiError):
    status_code = 500
    default_message = "Server error"
