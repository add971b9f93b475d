from __future__ import annotations

from datetime import datetime

import pandas as pd
import pytest

from delivery_tracker.pipeline.dates import EPOCH, parse_datetime


def test_day_first_with_minutes():
    assert parse_datetime("15/03/2024 14:30") == datetime(2024, 3, 15, 14, 30, 0)


def test_day_first_with_seconds():
    assert parse_datetime("01/12/2023 08:05:09") == datetime(2023, 12, 1, 8, 5, 9)


def test_iso_like_with_space():
    assert parse_datetime("2024-03-15 09:10:11") == datetime(2024, 3, 15, 9, 10, 11)


def test_month_first_two_digit_year():
    assert parse_datetime("03/15/24 10:00") == datetime(2024, 3, 15, 10, 0, 0)


def test_offset_suffix_is_stripped():
    assert parse_datetime("15/03/2024 14:30:00+03:00") == datetime(2024, 3, 15, 14, 30, 0)


def test_generic_fallback():
    assert parse_datetime("2024-03-15") == datetime(2024, 3, 15)


@pytest.mark.parametrize("raw", ["", None, "not a date", "99/99/9999 99:99"])
def test_unparseable_yields_epoch(raw):
    assert parse_datetime(raw) == EPOCH


def test_epoch_loses_against_real_date():
    real = parse_datetime("01/01/2000 00:00")
    assert real > parse_datetime("garbage")
    assert not (parse_datetime("garbage") > real)


def test_datetime_values_pass_through():
    dt = datetime(2024, 5, 1, 12, 0)
    assert parse_datetime(dt) == dt
    assert parse_datetime(pd.Timestamp("2024-05-01 12:00", tz="UTC")) == dt
