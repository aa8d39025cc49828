"""FastAPI router for the /v1/operations endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError

from notevault.dependencies import OperationDependencies, get_dependencies
from notevault.log import logger
from notevault.operations.dispatcher import describe_operations, dispatch
from notevault.operations.models import (
    ErrorDetail,
    ErrorResponse,
    OperationInfo,
    OperationResponse,
    parse_request,
)

router = APIRouter(prefix="/v1", tags=["operations"])

STATUS_BY_CODE = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "invalid_path": status.HTTP_400_BAD_REQUEST,
    "materialization_failed": 422,
    "generation_failed": status.HTTP_502_BAD_GATEWAY,
    "internal_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@router.get("/operations")
async def list_operations() -> list[OperationInfo]:
    """List available operations and their argument schemas."""
    return describe_operations()


@router.post("/operations")
async def run_operation(
    payload: dict[str, Any] = Body(...),
    deps: OperationDependencies = Depends(get_dependencies),
) -> OperationResponse:
    """Validate and execute a single operation.

    Args:
        payload: Request body with an `operation` field and its arguments
        deps: Vault, generator and trace id

    Returns:
        OperationResponse carrying the operation result

    Raises:
        HTTPException: 422 for invalid requests, or the status mapped from
            the operation's error code
    """
    try:
        request = parse_request(payload)
    except ValidationError as e:
        logger.info(
            "operation_invalid",
            extra={"operation": payload.get("operation"), "trace_id": deps.trace_id},
        )
        raise HTTPException(
            status_code=422,
            detail=ErrorResponse(
                error=ErrorDetail(
                    message=str(e),
                    type="invalid_request_error",
                    code="invalid_request",
                )
            ).model_dump(),
        )

    response = await dispatch(request, deps)
    if not response.ok and response.error is not None:
        raise HTTPException(
            status_code=STATUS_BY_CODE.get(response.error.code, 500),
            detail=ErrorResponse(error=response.error).model_dump(),
        )
    return response
