from __future__ import annotations

from typing import Any, Dict

import pandas as pd

from narrative.config import MS_PER_MINUTE
from narrative.rounding import round_half_up


def summary_statistics(view: pd.DataFrame) -> Dict[str, Any]:
    if view.empty:
        return {"avg_popularity": 0.0, "avg_duration_minutes": 0.0, "track_count": 0}
    avg_pop = pd.to_numeric(view["track_popularity"], errors="coerce").mean()
    avg_minutes = (pd.to_numeric(view["track_duration_ms"], errors="coerce").fillna(0) / MS_PER_MINUTE).mean()
    return {
        "avg_popularity": round_half_up(avg_pop, 1) or 0.0,
        "avg_duration_minutes": round_half_up(avg_minutes, 2) or 0.0,
        "track_count": int(len(view)),
    }
