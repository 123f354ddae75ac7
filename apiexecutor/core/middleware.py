"""
Hook chains for the request and response phases.

Each chain keeps an ordered list of async hooks. A hook receives a ``next``
continuation followed by the payload and must await ``next`` to hand control
to the hooks registered before it:

    async def hook(next, http_request):
        http_request.headers["X-Trace"] = "1"
        return await next(http_request)

The most recently registered hook runs first. Returning without awaiting
``next`` skips the rest of the chain; raising aborts it.
"""

import logging
from typing import Any, Awaitable, Callable, List, Tuple

from apiexecutor.core.exceptions import ChainInterruptedError

logger = logging.getLogger("apiexecutor.middleware")

Next = Callable[..., Awaitable[Any]]
Hook = Callable[..., Awaitable[Any]]


class HandlerChain:
    """Onion-style composition of hooks over one pipeline extension point."""

    def __init__(self, name: str = "chain"):
        self.name = name
        self._hooks: List[Hook] = []

    @property
    def hooks(self) -> Tuple[Hook, ...]:
        """Registered hooks in registration order."""
        return tuple(self._hooks)

    def __len__(self) -> int:
        return len(self._hooks)

    def register(self, hook: Hook) -> Hook:
        """
        Add a hook in front of the chain.

        Not safe against concurrent registration: register during setup.
        Returns the hook so this method can be used as a decorator.
        """
        self._hooks.append(hook)
        logger.debug(f"Hook registered on {self.name}: {getattr(hook, '__name__', hook)!r}")
        return hook

    def reset(self) -> None:
        """Drop every registered hook. Calls already running keep their snapshot."""
        self._hooks = []
        logger.debug(f"Hooks reset on {self.name}")

    async def run(self, *payload: Any, require_next: bool = False) -> Any:
        """
        Run every hook, newest first, over ``payload``.

        Returns the first payload item as seen by the innermost continuation,
        so a hook may substitute it by passing a replacement to ``next``.
        With ``require_next`` a hook that returns without handing control on
        raises ChainInterruptedError instead: the work after the chain must
        not happen.
        """
        hooks = tuple(self._hooks)
        reached: List[bool] = []
        result = await self._dispatch(hooks, len(hooks) - 1, payload, reached)
        if require_next and not reached:
            logger.debug(f"Chain {self.name} stopped before its end")
            raise ChainInterruptedError(self.name)
        return result

    async def _dispatch(
        self,
        hooks: Tuple[Hook, ...],
        index: int,
        payload: Tuple[Any, ...],
        reached: List[bool],
    ) -> Any:
        if index < 0:
            reached.append(True)
            return payload[0] if payload else None

        async def next_(*next_payload: Any) -> Any:
            return await self._dispatch(hooks, index - 1, next_payload or payload, reached)

        result = await hooks[index](next_, *payload)
        if result is None:
            return payload[0] if payload else None
        return result
