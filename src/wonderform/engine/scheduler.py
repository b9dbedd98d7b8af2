"""Per-field validation scheduling.

A :class:`FieldScheduler` decides whether a value change or a blur fires
the field's rule chain, owns the field's single debounce timer, and is the
only writer of the field's ``message``/``violation``/``pending`` after a
run settles.

Runs are numbered when they are scheduled.  Only the newest run may commit
its result; an older run that settles late is discarded, even while a newer
debounce timer is still waiting.  ``invalidate()`` advances the number
without starting a run, so a reset or clear cannot be overwritten by a run
that was already awaiting a slow rule.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import Any

from wonderform.domain.types import FieldDefinition, FieldState, Trigger, ValidationResult
from wonderform.engine.chain import run_chain
from wonderform.engine.observers import EventKind, StateEvent

logger = logging.getLogger(__name__)

RunTask = asyncio.Task[ValidationResult]


class FieldScheduler:
    """Trigger policy, debounce timer and run bookkeeping for one field.

    Parameters:
        name: Field name.
        definition: Immutable field configuration.
        state: The field's mutable state record.
        read_value: Returns the field's current value.
        data: Read-only view of the whole form data.
        notify: Observer channel for state changes.
        on_commit: Called with each committed result.
    """

    def __init__(
        self,
        name: str,
        definition: FieldDefinition,
        state: FieldState,
        *,
        read_value: Callable[[], Any],
        data: Mapping[str, Any],
        notify: Callable[[StateEvent], None],
        on_commit: Callable[[str, ValidationResult], None] | None = None,
    ) -> None:
        self.name = name
        self.definition = definition
        self._state = state
        self._read_value = read_value
        self._data = data
        self._notify = notify
        self._on_commit = on_commit
        self._generation = 0
        self._timer: RunTask | None = None
        self._tasks: set[RunTask] = set()

    # ------------------------------------------------------------------
    # Trigger policy
    # ------------------------------------------------------------------

    @property
    def generation(self) -> int:
        """Number of the newest run (or invalidation)."""
        return self._generation

    @property
    def has_timer(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def fires_on_change(self) -> bool:
        """Whether a value change should schedule a run right now."""
        if self.definition.trigger in (Trigger.CHANGE, Trigger.BLUR):
            return self._state.touched
        return False

    def fires_on_touch(self) -> bool:
        return self.definition.trigger is Trigger.BLUR

    def on_value_change(self) -> RunTask | None:
        if not self.fires_on_change():
            return None
        return self.schedule()

    def on_touch(self) -> RunTask | None:
        if not self.fires_on_touch():
            return None
        return self.schedule()

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def schedule(self) -> RunTask | None:
        """Start a run now, or (re)start the debounce timer.

        Returns the task that will settle the run.  Without a running event
        loop there is nothing to defer onto, so the run completes
        synchronously and None is returned.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; validating %s synchronously", self.name)
            self._drop_timer()
            asyncio.run(self.run())
            return None

        self._drop_timer()
        generation = self._advance()
        self._set_pending(True)
        delay = self.definition.debounce_ms / 1000
        if delay > 0:
            task = loop.create_task(self._debounced(delay, generation))
            self._timer = task
        else:
            task = loop.create_task(self.run(generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _debounced(self, delay: float, generation: int) -> ValidationResult:
        await asyncio.sleep(delay)
        # Past this point the run can no longer be cancelled by a new timer.
        self._timer = None
        return await self.run(generation)

    def cancel_timer(self) -> bool:
        """Cancel a waiting debounce timer. Returns True if one was cancelled.

        A waiting timer always holds the newest run, so cancelling it leaves
        nothing pending.
        """
        if not self._drop_timer():
            return False
        self._set_pending(False)
        return True

    def _drop_timer(self) -> bool:
        timer, self._timer = self._timer, None
        if timer is None or timer.done():
            return False
        timer.cancel()
        return True

    def invalidate(self) -> None:
        """Drop the timer and make every in-flight run stale."""
        self._advance()
        self._drop_timer()
        self._state.pending = False

    async def wait(self) -> None:
        """Wait until the timer and every scheduled run have finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    async def run(self, generation: int | None = None) -> ValidationResult:
        """Evaluate the rule chain against the current value and commit it.

        The value is read when the run starts, not when it was scheduled.
        *generation* is the number handed out by :meth:`schedule`; a direct
        call takes a fresh one.
        """
        if generation is None:
            generation = self._advance()
        if generation == self._generation:
            self._set_pending(True)
        try:
            result = await run_chain(self.name, self.definition, self._read_value(), self._data)
        except asyncio.CancelledError:
            if generation == self._generation:
                self._set_pending(False)
            raise

        if generation != self._generation:
            logger.debug(
                "Discarding superseded run %d of field %s (latest %d)",
                generation,
                self.name,
                self._generation,
            )
            return result

        self._state.message = result.message
        self._state.violation = result.violation
        self._state.pending = False
        self._notify(StateEvent(EventKind.FIELD, self.name))
        if self._on_commit is not None:
            self._on_commit(self.name, result)
        return result

    def _advance(self) -> int:
        self._generation += 1
        return self._generation

    def _set_pending(self, pending: bool) -> None:
        if self._state.pending == pending:
            return
        self._state.pending = pending
        self._notify(StateEvent(EventKind.FIELD, self.name))
