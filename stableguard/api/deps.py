"""
FastAPI dependencies.

Each request gets its own InvocationContext. The dedup store and any
injected capabilities live on app.state and are shared across requests.
"""

from fastapi import Request

from stableguard.workflows.context import InvocationContext


def get_context(request: Request) -> InvocationContext:
    return request.app.state.context_factory()
