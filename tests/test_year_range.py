from __future__ import annotations

import pandas as pd
import pytest

from narrative.year_range import (
    RangeSelection,
    YearRange,
    clamp_year,
    range_highlight,
    range_transition,
    release_years,
)


def test_clamp_year():
    assert clamp_year(1990) == 2009
    assert clamp_year(2030) == 2025
    assert clamp_year(2017) == 2017
    assert clamp_year(float("nan")) == 2009


def test_year_range_rejects_inverted_or_out_of_bounds():
    with pytest.raises(ValueError):
        YearRange(2020, 2010)
    with pytest.raises(ValueError):
        YearRange(2000, 2010)


def test_start_past_end_pushes_end():
    assert range_transition(YearRange(2010, 2015), "start", 2020) == YearRange(2020, 2020)


def test_start_past_end_clamps_before_pushing():
    assert range_transition(YearRange(2010, 2015), "start", 2100) == YearRange(2025, 2025)


def test_end_below_start_pulls_start():
    assert range_transition(YearRange(2015, 2020), "end", 2011) == YearRange(2011, 2011)


def test_transition_rounds_value():
    assert range_transition(YearRange.full(), "start", 2012.5) == YearRange(2013, 2025)
    assert range_transition(YearRange.full(), "end", 2019.4) == YearRange(2009, 2019)


def test_transition_is_idempotent():
    once = range_transition(YearRange(2010, 2015), "start", 2018)
    assert range_transition(once, "start", 2018) == once


def test_unknown_endpoint():
    with pytest.raises(ValueError):
        range_transition(YearRange.full(), "middle", 2010)  # type: ignore[arg-type]


def test_release_years_unparseable_is_na():
    years = release_years(pd.Series(["2015-02-03", "garbage", "", None]))
    assert years.iloc[0] == 2015
    assert years.iloc[1:].isna().all()


def test_highlight_full_and_collapsed():
    assert range_highlight(YearRange.full()) == {"left": 0.0, "width": 100.0}
    assert range_highlight(YearRange(2013, 2013)) == {"left": 25.0, "width": 1.0}
    assert range_highlight(YearRange(2025, 2025)) == {"left": 100.0, "width": 0.0}


def test_text_input_rejects_non_digits():
    sel = RangeSelection()
    assert sel.type_text("start", "20a") is False
    assert sel.text["start"] == "2009"
    assert sel.type_text("start", "201") is True
    assert sel.text["start"] == "201"


def test_commit_unparseable_text_reverts():
    sel = RangeSelection(YearRange(2012, 2020))
    sel.type_text("end", "")
    assert sel.commit_text("end") == YearRange(2012, 2020)
    assert sel.text == {"start": "2012", "end": "2020"}


def test_commit_text_runs_transition_and_syncs_mirrors():
    sel = RangeSelection(YearRange(2012, 2020))
    sel.type_text("start", "2023")
    assert sel.commit_text("start") == YearRange(2023, 2023)
    assert sel.text == {"start": "2023", "end": "2023"}


def test_commit_text_clamps_small_numbers():
    sel = RangeSelection(YearRange(2012, 2020))
    sel.type_text("start", "15")
    assert sel.commit_text("start") == YearRange(2009, 2020)


def test_slider_updates_mirrors():
    sel = RangeSelection()
    sel.set_from_slider("end", 2010)
    assert sel.committed == YearRange(2009, 2010)
    assert sel.text["end"] == "2010"


def test_commit_text_with_very_long_number_clamps():
    sel = RangeSelection(YearRange(2012, 2020))
    assert sel.type_text("start", "9" * 400)
    assert sel.commit_text("start") == YearRange(2025, 2025)
    assert sel.text == {"start": "2025", "end": "2025"}


def test_transition_clamps_huge_and_nan_values():
    assert range_transition(YearRange(2010, 2015), "end", 1e300) == YearRange(2010, 2025)
    assert range_transition(YearRange(2010, 2015), "start", float("nan")) == YearRange(2009, 2015)


def test_moved_handle_keeps_its_value_when_not_crossing():
    assert range_transition(YearRange(2010, 2015), "start", 2013.5) == YearRange(2014, 2015)
    assert range_transition(YearRange(2010, 2015), "end", 2012) == YearRange(2010, 2012)
