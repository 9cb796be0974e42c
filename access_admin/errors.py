# access_admin/errors.py


class AppError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400


class AuthorizationError(AppError):
    """No session (401) or not allowed to perform the action (403)."""

    status_code = 403

    @classmethod
    def unauthenticated(cls, message="Unauthorized"):
        return cls(message, status_code=401)

    @classmethod
    def forbidden(cls, message="Forbidden"):
        return cls(message, status_code=403)


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class PersistenceError(AppError):
    status_code = 500


class DispatchError(AppError):
    status_code = 502
