"""Engine layer — rule chains, scheduling, aggregation, and the form façade.

The engine depends on the domain layer and asyncio only.  It has no
knowledge of rendering; UI layers consume :class:`FieldBinding` props and
:meth:`FormEngine.subscribe` notifications.
"""

from wonderform.engine.binding import FieldBinding
from wonderform.engine.form import FormEngine, FormOptions
from wonderform.engine.observers import EventKind, StateEvent

__all__ = ["EventKind", "FieldBinding", "FormEngine", "FormOptions", "StateEvent"]
