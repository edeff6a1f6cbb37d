"""Change notifications for observers of a file tree.

A rendering collaborator (for example a live preview) subscribes to the
TreeEventBus owned by a FileTree and is told about every mutation once it has
been fully applied. Each tree owns its own bus; there is no process-wide
instance, so independent sessions never see each other's events.

Example:
    >>> bus = TreeEventBus()
    >>> class PreviewListener:
    ...     def handle_event(self, event):
    ...         print(f"{event.type.value}: {event.path}")
    >>> bus.subscribe(PreviewListener())
    >>> tree = FileTree(events=bus)
    >>> tree.create_file("/App.jsx", "export default function App() {}")
    created: /App.jsx
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol
from uuid import uuid4

logger = logging.getLogger(__name__)


class TreeEventType(Enum):
    """Kinds of tree mutations."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass
class TreeEvent:
    """A single completed mutation.

    Attributes:
        type: The type of mutation
        path: Normalized path affected (the destination for renames)
        kind: ``"file"`` or ``"directory"``
        data: Mutation-specific data (``old_path`` for renames)
        event_id: Unique identifier for event correlation
    """

    type: TreeEventType
    path: str
    kind: str
    data: dict[str, Any] = field(default_factory=dict)
    event_id: str = field(default_factory=lambda: str(uuid4()))


class TreeEventListener(Protocol):
    """Protocol for tree event listeners."""

    def handle_event(self, event: TreeEvent) -> None:
        """Handle an event.

        Args:
            event: The event to handle
        """
        pass


class TreeEventBus:
    """Observer registry for one file tree.

    Listeners are called synchronously, in subscription order, after the
    mutation they describe has completed.
    """

    def __init__(self) -> None:
        self._listeners: list[TreeEventListener] = []

    def subscribe(self, listener: TreeEventListener) -> None:
        """Subscribe a listener to events.

        Args:
            listener: Object implementing TreeEventListener protocol
        """
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: TreeEventListener) -> None:
        """Unsubscribe a previously subscribed listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, event: TreeEvent) -> None:
        """Emit an event to all listeners.

        The mutation is already applied when this runs, so a failing listener
        is logged and the remaining listeners are still notified.

        Args:
            event: Event to emit
        """
        logger.debug(f"Tree event {event.type.value}: {event.path}")
        for listener in list(self._listeners):
            try:
                listener.handle_event(event)
            except Exception:
                logger.exception(
                    f"Listener {type(listener).__name__} failed on "
                    f"{event.type.value} {event.path}"
                )

    def clear(self) -> None:
        """Remove all listeners."""
        self._listeners.clear()

    @property
    def listener_count(self) -> int:
        """Number of subscribed listeners."""
        return len(self._listeners)
