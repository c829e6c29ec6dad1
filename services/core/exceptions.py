"""
Domain Exceptions for the Agent Configuration core

All exceptions derive from BaseConfigException.
Configuration *absence* is not an exception: missing keys resolve to defaults.
"""


class BaseConfigException(Exception):
    """Base exception for configuration and policy errors"""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        """Serialize for an API response"""
        return {
            "error": {
                "code": self.__class__.__name__,
                "message": self.message,
                "details": self.details
            }
        }


# =============================================================================
# Input validation
# =============================================================================

class ConfigValidationError(BaseConfigException):
    """Malformed evaluator or setter input (never silently coerced)"""

    def __init__(self, field: str, value, reason: str):
        super().__init__(
            message=f"Invalid value for '{field}': {reason}",
            details={
                "field": field,
                "value": repr(value),
                "reason": reason
            }
        )


# =============================================================================
# Store failures
# =============================================================================

class ConfigPersistenceError(BaseConfigException):
    """Configuration store read or write failed"""

    def __init__(self, operation: str, key: str = None, cause: Exception = None):
        self.cause = cause
        super().__init__(
            message="Configuration store operation failed",
            details={
                "operation": operation,
                "key": key
            }
        )


class ConfigNotFound(BaseConfigException):
    """An admin operation addressed a key that was never set"""

    def __init__(self, key: str):
        super().__init__(
            message="Configuration not found",
            details={"key": key}
        )


class CorruptConfigValue(BaseConfigException):
    """A persisted value cannot be parsed into its expected type"""

    def __init__(self, key: str, value: str, reason: str):
        super().__init__(
            message=f"Stored value for '{key}' is invalid: {reason}",
            details={
                "key": key,
                "reason": reason
            }
        )


# =============================================================================
# HTTP Status Mapping
# =============================================================================

EXCEPTION_TO_STATUS = {
    ConfigValidationError: 400,
    ConfigNotFound: 404,
    ConfigPersistenceError: 500,
    CorruptConfigValue: 500,
}

# Exceptions whose message/details are replaced by a generic body over HTTP
INTERNAL_EXCEPTIONS = (ConfigPersistenceError, CorruptConfigValue)
