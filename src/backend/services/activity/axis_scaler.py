
from __future__ import annotations
import math
from typing import Optional, Sequence

import numpy as np

DEFAULT_PERCENTILE = 0.99
DEFAULT_HEADROOM_RATIO = 0.01
DEFAULT_PADDING = 100


def compute_y_max(
    totals: Sequence[int],
    changes_max: int,
    *,
    percentile: float = DEFAULT_PERCENTILE,
    headroom_ratio: float = DEFAULT_HEADROOM_RATIO,
    padding: float = DEFAULT_PADDING,
) -> Optional[float]:
    """Return the y-axis maximum for the activity graph.

    The scale follows the 99th percentile of daily changes instead of the
    maximum, so a single huge day (a vendored import, a big merge) is clipped
    rather than flattening every other day. Headroom above the percentile is
    capped at ``headroom_ratio`` of it, plus a fixed ``padding``.

    Returns ``None`` for an empty series; nothing should be rendered then.
    """
    values = np.sort(np.asarray(totals, dtype=np.int64))
    n = values.size
    if n == 0:
        return None

    p = float(values[min(int(math.floor(n * percentile)), n - 1)])
    return p + min(float(changes_max) - p, p * headroom_ratio) + padding


__all__ = ["DEFAULT_HEADROOM_RATIO", "DEFAULT_PADDING", "DEFAULT_PERCENTILE", "compute_y_max"]
