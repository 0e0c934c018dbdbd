from fastapi import HTTPException

from metallbau.services.errors import CostingError, ForbiddenError, NotFoundError

_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (ForbiddenError, 403),
)


def to_http(exc: CostingError) -> HTTPException:
    for error_cls, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))
