"""Shared dependencies injected into operation handlers."""

import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass

from fastapi import Request

from notevault.generation import TextGenerator
from notevault.vault import Vault


@dataclass
class OperationDependencies:
    """Collaborators available to every operation handler.

    The vault and generator are built once by the app factory and shared
    across requests; the trace id is per request.
    """

    vault: Vault
    generator: TextGenerator
    trace_id: str


async def get_dependencies(request: Request) -> AsyncIterator[OperationDependencies]:
    """FastAPI dependency provider for OperationDependencies."""
    yield OperationDependencies(
        vault=request.app.state.vault,
        generator=request.app.state.generator,
        trace_id=request.headers.get("X-Trace-Id", str(uuid.uuid4())),
    )
