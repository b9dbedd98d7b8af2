"""Per-field props handed to a UI layer."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FieldBinding:
    """Snapshot of one field plus callbacks routed back into the engine.

    Attributes:
        name: Field name.
        value: Value at the time the binding was built.
        error: Current message, or None while the field is valid.
        on_input: Set the value (dirty marking + change trigger).
        on_blur: Mark touched (blur trigger).
    """

    name: str
    value: Any
    error: str | None
    on_input: Callable[[Any], asyncio.Task[Any] | None]
    on_blur: Callable[[], asyncio.Task[Any] | None]

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value, "error": self.error}
