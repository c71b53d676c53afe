"""
Recurring epoch calendar that phase-locks the asset's macro cycle.

The table holds the known halving dates plus published projections. Past the
last listed date, further epochs are projected every `projection_months`
months, so the calendar never runs out for long loan terms.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Tuple

import pandas as pd

HALVING_DATES: Tuple[date, ...] = (
    date(2012, 11, 28),
    date(2016, 7, 9),
    date(2020, 5, 11),
    date(2024, 4, 20),
    # projected
    date(2028, 4, 20),
    date(2032, 4, 20),
    date(2036, 4, 20),
    date(2040, 4, 20),
)


def add_months(d: date, months: int) -> date:
    """Calendar month arithmetic; day-of-month clamps to the target month's end."""
    return (pd.Timestamp(d) + pd.DateOffset(months=months)).date()


def months_between(start: date, end: date) -> int:
    """Whole calendar months from `start` to `end`, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


@dataclass(frozen=True)
class EpochCalendar:
    dates: Tuple[date, ...] = HALVING_DATES
    projection_months: int = 48

    def __post_init__(self):
        if not self.dates:
            raise ValueError("EpochCalendar needs at least one epoch date")
        object.__setattr__(self, "dates", tuple(sorted(self.dates)))

    def last_epoch(self, reference: date) -> date:
        """Most recent epoch on or before `reference` (the first epoch if none precede it)."""
        if reference < self.dates[0]:
            return self.dates[0]
        last = self.dates[-1]
        if reference >= last:
            steps = 0
            while add_months(last, (steps + 1) * self.projection_months) <= reference:
                steps += 1
            return add_months(last, steps * self.projection_months)
        found = self.dates[0]
        for d in self.dates:
            if d <= reference:
                found = d
            else:
                break
        return found

    def next_epoch(self, reference: date) -> date:
        for d in self.dates:
            if d > reference:
                return d
        steps = 1
        while add_months(self.dates[-1], steps * self.projection_months) <= reference:
            steps += 1
        return add_months(self.dates[-1], steps * self.projection_months)

    def cycle_offset(self, reference: date, cycle_months: int = 48) -> int:
        return months_between(self.last_epoch(reference), reference) % cycle_months

    @classmethod
    def from_config(cls, raw: Dict) -> "EpochCalendar":
        dates = tuple(date.fromisoformat(str(d)) for d in raw.get("dates", [])) or HALVING_DATES
        return cls(dates=dates, projection_months=int(raw.get("projectionMonths", 48)))


DEFAULT_EPOCHS = EpochCalendar()
