"""Application exceptions mapped to HTTP responses by ``reviews_api.core.handlers``."""

from reviews_api.core.enums import AuthFailure


class AppException(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message}


class InvalidInputException(AppException):
    status_code = 400


class UnauthorizedException(AppException):
    status_code = 401

    def __init__(self, message: str, reason: AuthFailure):
        self.reason = reason
        super().__init__(message)


class ForbiddenException(AppException):
    status_code = 403


class NotFoundException(AppException):
    status_code = 404


class ConflictException(AppException):
    status_code = 409


class ConfigurationError(AppException):
    """Raised when the auth core is asked to work without its secret."""

    status_code = 500

    def __init__(self, message: str = "Authentication configuration error."):
        super().__init__(message)
