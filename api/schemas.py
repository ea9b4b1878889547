from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from narrative.config import ALL_GENRES, YEAR_MAX, YEAR_MIN


class FiltersModel(BaseModel):
    genre: str = ALL_GENRES
    year_start: float = YEAR_MIN
    year_end: float = YEAR_MAX


class RangeTransitionModel(BaseModel):
    start: int = Field(default=YEAR_MIN, ge=YEAR_MIN, le=YEAR_MAX)
    end: int = Field(default=YEAR_MAX, ge=YEAR_MIN, le=YEAR_MAX)
    endpoint: Literal["start", "end"]
    value: float
