from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import pandas as pd


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    if isinstance(value, float) and math.isinf(value):
        return value
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))
