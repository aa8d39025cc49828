"""Typed operation protocol over the vault and text generator."""

from notevault.operations.dispatcher import describe_operations, dispatch
from notevault.operations.models import OperationRequest, OperationResponse, parse_request

__all__ = [
    "OperationRequest",
    "OperationResponse",
    "describe_operations",
    "dispatch",
    "parse_request",
]
