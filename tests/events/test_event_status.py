from datetime import date

import pytest

from src.event_registration.event_registration.core.enums import EventStatus
from src.event_registration.event_registration.events.factory import EventStatusStrategyFactory
from src.event_registration.event_registration.events.model import EventDates
from src.event_registration.event_registration.events.strategies.event_window_strategy import EventWindowStrategy
from src.event_registration.event_registration.events.strategies.registration_window_strategy import (
    RegistrationWindowStrategy,
)

WITH_WINDOW = EventDates(
    start_date=date(2025, 3, 10),
    end_date=date(2025, 3, 12),
    registration_start_date=date(2025, 3, 1),
    registration_end_date=date(2025, 3, 5),
)
WITHOUT_WINDOW = EventDates(start_date=date(2025, 3, 10), end_date=date(2025, 3, 12))


def test_factory_picks_registration_window_when_both_dates_set():
    assert isinstance(EventStatusStrategyFactory().for_dates(WITH_WINDOW), RegistrationWindowStrategy)


def test_factory_falls_back_to_event_window_when_window_incomplete():
    half_window = EventDates(
        start_date=date(2025, 3, 10),
        end_date=date(2025, 3, 12),
        registration_start_date=date(2025, 3, 1),
    )
    factory = EventStatusStrategyFactory()

    assert isinstance(factory.for_dates(WITHOUT_WINDOW), EventWindowStrategy)
    assert isinstance(factory.for_dates(half_window), EventWindowStrategy)


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2025, 2, 28), EventStatus.UPCOMING),
        (date(2025, 3, 1), EventStatus.OPEN),
        (date(2025, 3, 5), EventStatus.OPEN),
        (date(2025, 3, 6), EventStatus.CLOSED),
    ],
)
def test_status_follows_registration_window(today, expected):
    assert EventStatusStrategyFactory().resolve(today=today, dates=WITH_WINDOW) == expected


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2025, 3, 9), EventStatus.UPCOMING),
        (date(2025, 3, 10), EventStatus.OPEN),
        (date(2025, 3, 12), EventStatus.OPEN),
        (date(2025, 3, 13), EventStatus.CLOSED),
    ],
)
def test_status_without_window_uses_event_dates(today, expected):
    assert EventStatusStrategyFactory().resolve(today=today, dates=WITHOUT_WINDOW) == expected


def test_cancelled_is_sticky_until_overridden():
    factory = EventStatusStrategyFactory()
    today = date(2025, 3, 3)

    assert factory.resolve(today=today, dates=WITH_WINDOW, current=EventStatus.CANCELLED) == EventStatus.CANCELLED
    assert (
        factory.resolve(today=today, dates=WITH_WINDOW, current=EventStatus.CANCELLED, override=EventStatus.OPEN)
        == EventStatus.OPEN
    )


def test_decision_reports_the_window_used():
    decision = RegistrationWindowStrategy().decide(today=date(2025, 3, 3), dates=WITH_WINDOW)

    assert decision.status == EventStatus.OPEN
    assert (decision.window_start, decision.window_end) == (date(2025, 3, 1), date(2025, 3, 5))
