"""
HTTP routers
"""

from fastapi import status
from fastapi.responses import JSONResponse

from restaurant_pos.schemas.results import ActionResult, StationErrorCode

# HTTP status for each failure code; the body keeps the {success, error} shape
ERROR_STATUS_CODES = {
    StationErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    StationErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    StationErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    StationErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    StationErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    StationErrorCode.VALIDATION: 422,
    StationErrorCode.STORE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def result_response(result: ActionResult, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """Serialize an operation result with the matching HTTP status"""
    if result.success:
        status_code = success_status
    else:
        status_code = ERROR_STATUS_CODES.get(result.error_code, status.HTTP_400_BAD_REQUEST)
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))
