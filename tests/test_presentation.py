import pytest
from datetime import timedelta

from srscore.models import MasteryLevel, SRSState
from srscore.presentation import format_interval, mastery_level


@pytest.mark.parametrize(
    "fields, expected",
    [
        ({}, MasteryLevel.New),
        ({"learning_step": 1}, MasteryLevel.Learning),
        ({"learning_step": 2, "interval": 10, "ease_factor": 230}, MasteryLevel.Learning),
        ({"learning_step": 3, "interval": 1, "repetitions": 1}, MasteryLevel.Young),
        ({"learning_step": 3, "interval": 14, "repetitions": 5}, MasteryLevel.Young),
        ({"learning_step": 3, "interval": 30, "repetitions": 4}, MasteryLevel.Young),
        ({"learning_step": 3, "interval": 15, "repetitions": 5}, MasteryLevel.Mature),
    ],
)
def test_mastery_level(fields, expected):
    assert mastery_level(SRSState(**fields)) is expected


def test_mastery_level_with_custom_graduation_step():
    state = SRSState(learning_step=3, interval=1, repetitions=1)
    assert mastery_level(state, graduated_step=4) is MasteryLevel.Learning


def test_lapsed_card_with_no_repetitions_is_not_new():
    # repetitions reset on lapse, but the card sits at learning step 2
    state = SRSState(learning_step=2, repetitions=0, interval=25)
    assert mastery_level(state) is MasteryLevel.Learning


@pytest.mark.parametrize(
    "days, expected",
    [
        (0, "<1d"),
        (1, "1d"),
        (6, "6d"),
        (7, "1w"),
        (10, "1w"),
        (25, "4w"),
        (29, "4w"),
        (30, "1mo"),
        (45, "2mo"),
        (364, "12mo"),
        (365, "1.0y"),
        (500, "1.4y"),
    ],
)
def test_format_interval_days(days, expected):
    assert format_interval(days) == expected


@pytest.mark.parametrize(
    "delta, expected",
    [
        (timedelta(seconds=5), "1m"),
        (timedelta(minutes=1), "1m"),
        (timedelta(minutes=10), "10m"),
        (timedelta(hours=3), "3h"),
        (timedelta(days=1), "1d"),
        (timedelta(days=4), "4d"),
        (timedelta(days=29), "4w"),
        (timedelta(days=33), "1mo"),
        (timedelta(minutes=59), "59m"),
        (timedelta(minutes=59, seconds=30), "1h"),
        (timedelta(hours=23, minutes=29), "23h"),
        (timedelta(hours=23, minutes=30), "1d"),
    ],
)
def test_format_interval_timedelta(delta, expected):
    assert format_interval(delta) == expected


@pytest.mark.parametrize("value", [-1, timedelta(minutes=-5)])
def test_format_interval_rejects_negative(value):
    with pytest.raises(ValueError, match="must not be negative"):
        format_interval(value)
