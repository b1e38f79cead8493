"""
Ambient execution context for the active tenant database client

Binds a value to the current asyncio task for the duration of a callback,
so code deep in the call chain can find the tenant's client without it
being passed down explicitly. Backed by ``contextvars``: tasks spawned
inside the callback inherit the binding, unrelated tasks never see it.
"""

from contextvars import ContextVar
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union
import inspect
import sys
import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# Runtimes without a task-aware context (Pyodide, WASI) run callbacks directly
_UNSUPPORTED_PLATFORMS = ("emscripten", "wasi")


class ExecutionContext(Generic[T]):
    """Stack-scoped binding of a value to the running call chain"""

    def __init__(self, name: str, supported: Optional[bool] = None):
        self.name = name
        if supported is None:
            supported = sys.platform not in _UNSUPPORTED_PLATFORMS
        self.supported = supported
        self._var: Optional[ContextVar] = None

    def _storage(self) -> ContextVar:
        if self._var is None:
            self._var = ContextVar(self.name, default=None)
            logger.debug(f"Execution context created: {self.name}")
        return self._var

    async def run(self, value: T, callback: Callable[..., Union[R, Awaitable[R]]], *args: Any, **kwargs: Any) -> R:
        """Run callback with value bound until the callback settles"""
        if not self.supported:
            result = callback(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result

        var = self._storage()
        token = var.set(value)
        try:
            result = callback(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result
        finally:
            var.reset(token)

    def get_active(self) -> Optional[T]:
        """Value bound for the calling context, or None"""
        if not self.supported or self._var is None:
            return None
        return self._var.get()


# Active tenant database client for the current request
client_context: ExecutionContext = ExecutionContext("active_tenant_client")
