"""Custom exceptions for the catalog admin API."""


class CatalogError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['success'] = False
        rv['message'] = self.message
        return rv


class ValidationError(CatalogError):
    """Raised when request input fails form validation."""
    def __init__(self, errors, message="Validation Error"):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__(message, 400, {'error': self.errors})


class NotFoundError(CatalogError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class ConflictError(CatalogError):
    """Raised on a uniqueness violation or a delete blocked by dependent records."""
    def __init__(self, message, payload=None):
        super().__init__(message, 409, payload)
