"""Translation of domain errors to HTTP errors."""

from fastapi import HTTPException, status

from auction.core.exceptions import (
    AuctionError,
    InvalidArgumentError,
    NotFoundError,
    TransitionError,
)

ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidArgumentError: status.HTTP_400_BAD_REQUEST,
    TransitionError: status.HTTP_409_CONFLICT,
}


def http_error(error: AuctionError) -> HTTPException:
    status_code = ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=status_code, detail=str(error))
