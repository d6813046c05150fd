"""
SongsStore: state container and effect dispatcher.

`dispatch()` reduces an action synchronously and notifies listeners. For a
`*Start` action it also launches the matching effect as an asyncio task.

Latest-wins semantics (generation counter):

1. Each Start action increments the generation of its category
2. The effect runs to completion; nothing is cancelled
3. Its result is applied only if the category generation is unchanged

So a newer fetch supersedes an older one still in flight, and the older
response is dropped when it arrives.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from songbook.client.api import SongsApi
from songbook.client.effects import EFFECTS, Effect
from songbook.client.state import Action, SongsState, songs_reducer

logger = logging.getLogger(__name__)

Listener = Callable[[SongsState], None]


class SongsStore:
    """
    Holds the client songs state.

    Usage:
        store = SongsStore(api)
        store.subscribe(render)
        store.dispatch(FetchSongsStart(page=1, limit=10))
        await store.wait_idle()
    """

    def __init__(
        self,
        api: SongsApi,
        state: SongsState | None = None,
        effects: dict[type[Action], Effect] | None = None,
    ) -> None:
        self._api = api
        self._state = state if state is not None else SongsState()
        self._effects = effects if effects is not None else EFFECTS
        self._listeners: list[Listener] = []
        self._generations: dict[str, int] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def state(self) -> SongsState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def get_generation(self, category: str) -> int:
        """Current generation counter for a request category."""
        return self._generations.get(category, 0)

    def dispatch(self, action: Action) -> None:
        """
        Apply `action` and, for Start actions, launch the matching effect.

        Launching an effect requires a running event loop.
        """
        self._apply(action)

        effect = self._effects.get(type(action))
        if effect is None:
            return

        generation = self.get_generation(action.category) + 1
        self._generations[action.category] = generation
        logger.debug("%s (generation %d)", action.action_type, generation)

        task = asyncio.get_running_loop().create_task(self._run_effect(effect, action, generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_idle(self) -> None:
        """Wait until every launched effect has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _run_effect(self, effect: Effect, action: Action, generation: int) -> None:
        result = await effect(self._api, action)

        if self.get_generation(action.category) != generation:
            logger.debug(
                "Dropping %s: superseded (generation %d, current %d)",
                result.action_type,
                generation,
                self.get_generation(action.category),
            )
            return

        self._apply(result)

    def _apply(self, action: Action) -> None:
        self._state = songs_reducer(self._state, action)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Listener failed while handling %s", action.action_type)
