"""
Mapping from core exceptions to HTTP errors.
"""

from fastapi import HTTPException

from core import CoreError, InvalidOperationError, NotFoundError


def to_http_exception(error: CoreError) -> HTTPException:
    """Translate a CoreError raised by the agent service into an HTTPException."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, InvalidOperationError):
        return HTTPException(status_code=409, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
