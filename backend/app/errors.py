from enum import Enum


class ErrorType(Enum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    AUTHENTICATION = "authentication"
    STORAGE_FAILURE = "storage_failure"
    INTERNAL_ERROR = "internal_error"


# Map error types to HTTP status codes
ERROR_STATUS_MAP = {
    ErrorType.NOT_FOUND: 404,
    ErrorType.VALIDATION: 400,
    ErrorType.CONFLICT: 409,
    ErrorType.AUTHENTICATION: 401,
    ErrorType.STORAGE_FAILURE: 500,
    ErrorType.INTERNAL_ERROR: 500,
}
