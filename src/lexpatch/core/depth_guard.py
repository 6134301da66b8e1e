"""Depth limiting for recursive tree traversal.

Patch documents come from untrusted authors. A document nested a few
thousand levels deep would turn a recursive validator into a RecursionError;
DepthGuard turns it into a DepthLimitExceededError the caller can report.

Each traversal creates its own guard, so guards are never shared between
threads or tasks.

Python 3.13+.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field

from lexpatch.constants import MAX_DEPTH
from lexpatch.diagnostics import DepthLimitExceededError

__all__ = ["DepthGuard", "DepthLimitExceededError", "clamp_to_recursion_limit"]

logger = logging.getLogger(__name__)

# Frames kept free for the traversal's own call overhead.
_RESERVED_FRAMES = 50


@dataclass(slots=True)
class DepthGuard:
    """Re-entrant context manager counting how deep a traversal has gone.

    Example:
        >>> guard = DepthGuard(max_depth=2, label="universal.cups")
        >>> with guard, guard:
        ...     guard.depth
        2

    Attributes:
        max_depth: Deepest level that may be entered (clamped below the
            interpreter recursion limit)
        label: Where the traversal started; used in the error message
        depth: Levels currently entered
        peak: Deepest level reached so far
    """

    max_depth: int = MAX_DEPTH
    label: str = "tree"
    depth: int = field(default=0, init=False)
    peak: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            msg = f"max_depth must be at least 1, got {self.max_depth}"
            raise ValueError(msg)
        self.max_depth = clamp_to_recursion_limit(self.max_depth)

    def __enter__(self) -> DepthGuard:
        # Raise before counting: __exit__ does not run when __enter__ fails.
        if self.depth >= self.max_depth:
            msg = f"{self.label} is nested deeper than {self.max_depth} levels"
            raise DepthLimitExceededError(msg)
        self.depth += 1
        self.peak = max(self.peak, self.depth)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.depth -= 1

    @property
    def remaining(self) -> int:
        """Levels that can still be entered."""
        return self.max_depth - self.depth


def clamp_to_recursion_limit(requested: int, reserve_frames: int = _RESERVED_FRAMES) -> int:
    """Lower a requested depth so that it fits under sys.getrecursionlimit().

    Args:
        requested: Desired maximum depth
        reserve_frames: Frames left free for call overhead

    Returns:
        requested, or the highest safe depth when requested is too deep
    """
    ceiling = sys.getrecursionlimit() - reserve_frames
    if requested <= ceiling:
        return requested
    logger.warning(
        "Depth limit %d exceeds the recursion limit %d; clamping to %d",
        requested,
        sys.getrecursionlimit(),
        ceiling,
    )
    return ceiling
