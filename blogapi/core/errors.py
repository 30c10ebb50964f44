class BlogError(Exception):
    """Base class for errors surfaced to API callers"""
    status_code = 500

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(BlogError):
    """Malformed or missing input"""
    status_code = 422


class NotFoundError(BlogError):
    """Referenced entity does not exist"""
    status_code = 404


class AuthorizationError(BlogError):
    """Actor is not the owner of the resource"""
    status_code = 403


class StorageError(BlogError):
    """Backing store failure"""
    status_code = 500
