"""A vertical text scrollbar."""

from __future__ import annotations

import math

SCROLLBAR_WIDTH = 1

SCROLLBAR_THUMB = "█"
SCROLLBAR_TRACK = "░"


def _round(x: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def scrollbar(height: int, total: int, visible: int, offset: int) -> str:
    """Render a scrollbar ``height`` lines tall.

    ``total`` is the number of lines of content, ``visible`` how many are in
    view and ``offset`` the first line in view.
    """
    ratio = height / total
    thumb_height = max(1, _round(visible * ratio))
    thumb_offset = max(0, min(height - thumb_height, _round(offset * ratio)))
    after = max(0, height - thumb_offset - thumb_height)
    lines = [SCROLLBAR_TRACK] * thumb_offset + [SCROLLBAR_THUMB] * thumb_height + [SCROLLBAR_TRACK] * after
    return "\n".join(lines)