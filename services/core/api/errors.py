"""
Domain exception -> HTTP mapping shared by the config routers
"""
from fastapi import HTTPException

from exceptions import BaseConfigException, EXCEPTION_TO_STATUS, INTERNAL_EXCEPTIONS
from logging_config import log_error


def map_exception_to_http(exc: BaseConfigException) -> HTTPException:
    """
    Map domain exception to HTTP response.

    Store and corrupt-value failures are logged with their cause and
    answered with a generic body; nothing about the store leaks out.
    """
    exception_class = type(exc)
    status_code = EXCEPTION_TO_STATUS.get(exception_class, 500)
    error_code = exception_class.__name__

    if isinstance(exc, INTERNAL_EXCEPTIONS) or status_code >= 500:
        log_error(getattr(exc, "cause", None) or exc, {"code": error_code, **exc.details})
        return HTTPException(
            status_code=status_code,
            detail={
                "error": {
                    "code": error_code,
                    "message": "Internal configuration error"
                }
            }
        )

    return HTTPException(status_code=status_code, detail=exc.to_dict())
