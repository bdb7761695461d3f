# ============================================================================
# src/document_filing/core/collaborators.py
# ============================================================================
"""
Host Collaborator Calls

The cache and the correction history live with the host and are reached
through optional callbacks on the pipeline config. Callbacks may be plain
functions or coroutines. A missing callback, or one that fails, is treated
as "no data": the failure is logged as a warning and the pipeline carries on.
"""

from typing import Any, Callable, Optional
import inspect
import logging

logger = logging.getLogger(__name__)


async def invoke_collaborator(
    callback: Optional[Callable[..., Any]],
    description: str,
    default: Any = None,
    **kwargs
) -> Any:
    """
    Call callback with kwargs, awaiting the result when it is awaitable.

    Returns:
        The callback's result, or default when the callback is absent or
        raises
    """
    if callback is None:
        return default

    try:
        result = callback(**kwargs)
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        logger.warning(f"{description} failed: {e}")
        return default

    return default if result is None else result
