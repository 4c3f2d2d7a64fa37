class DomainException(Exception):
    pass


class InvalidInputError(DomainException):
    pass


class LastAdminError(InvalidInputError):
    def __init__(self):
        super().__init__("Cannot delete the last admin user")


class UnauthorizedError(DomainException):
    pass


class ConflictError(DomainException):
    pass


class NotFoundError(DomainException):
    pass


class OrderNotFoundError(NotFoundError):
    pass


class UserNotFoundError(NotFoundError):
    pass


class ProductNotFoundError(NotFoundError):
    pass


class NotificationNotFoundError(NotFoundError):
    pass


class StorageError(DomainException):
    """Any failure reported by the database or object storage"""
    pass
