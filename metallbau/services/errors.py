class CostingError(ValueError):
    """Base for booking/controlling rejections. Raised before any write."""

    kind = "invalid_request"


class NotFoundError(CostingError):
    kind = "not_found"


class InvalidRequestError(CostingError):
    kind = "invalid_request"


class ForbiddenError(CostingError):
    kind = "forbidden"
