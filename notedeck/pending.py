"""Coalescing of view updates until the view can be observed."""

import logging
from collections.abc import Callable
from enum import IntEnum

logger = logging.getLogger(__name__)


class PendingUpdate(IntEnum):
    """Deferred work for the view, ordered by severity."""

    NONE = 0
    REDRAW = 1
    RECOMPUTE = 2


class PendingUpdates:
    """Accumulates requested updates and runs the strongest one on flush.

    Any number of events between two observable moments collapse into a
    single recompute and/or render.
    """

    def __init__(self) -> None:
        self.level = PendingUpdate.NONE

    def escalate(self, level: PendingUpdate) -> None:
        """Raise the pending level; a lower request never downgrades it."""
        if level > self.level:
            self.level = level

    def flush_if_observable(
        self,
        visible: bool,
        recompute: Callable[[], None],
        render: Callable[[], None],
    ) -> PendingUpdate:
        """Run the pending work if the view is visible.

        Returns:
            The level that was acted on; NONE when nothing ran.
        """
        if not visible or self.level == PendingUpdate.NONE:
            return PendingUpdate.NONE

        level = self.level
        if level == PendingUpdate.RECOMPUTE:
            recompute()
        render()
        self.level = PendingUpdate.NONE
        logger.debug(f"Flushed pending {level.name.lower()}")
        return level
