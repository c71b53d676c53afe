"""
Deterministic asset price-path model.

The seasonal model splits each 48-month macro cycle into four phases
(summer run-up, fall correction, flat winter, spring recovery) anchored to the
epoch calendar, and sizes the per-month factors so that one full cycle
compounds to the target annual return. The steady and custom models apply a
single constant monthly rate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Mapping, Optional, Tuple

import numpy as np

from .epochs import DEFAULT_EPOCHS, EpochCalendar, add_months, months_between
from .errors import ConfigError
from .types import PerformanceModel, PerformanceSettings

PHASES = ("summer", "fall", "winter", "spring")
STEADY_PHASE = "steady"

DEFAULT_SENTIMENT_MULTIPLIERS: Mapping[str, float] = {
    "bearish": 0.5,
    "neutral": 1.0,
    "bullish": 1.5,
}

# Floor for interpolated per-cycle CAGR, in percent.
MIN_CYCLE_CAGR = 1.0


@dataclass(frozen=True)
class CyclePolicy:
    summer_months: int = 18
    fall_months: int = 12
    winter_months: int = 6
    spring_months: int = 12
    target_fall_factor: float = 0.30
    summer_gain_share: float = 0.65
    spring_gain_share: float = 0.35
    # Months each gain share is spread over when sizing the per-month factors.
    # Matching the phase lengths makes one full cycle compound to the target.
    summer_factor_months: int = 18
    spring_factor_months: int = 12

    def __post_init__(self):
        lengths = (
            self.summer_months, self.fall_months, self.winter_months, self.spring_months,
            self.summer_factor_months, self.spring_factor_months,
        )
        if any(int(n) != n or n <= 0 for n in lengths):
            raise ConfigError(f"cycle month counts must be positive whole months, got {lengths}")
        if not 0 < self.target_fall_factor <= 1:
            raise ConfigError(f"target_fall_factor must be in (0, 1], got {self.target_fall_factor}")
        if self.summer_gain_share < 0 or self.spring_gain_share < 0:
            raise ConfigError("gain shares must be non-negative")
        if not math.isclose(self.summer_gain_share + self.spring_gain_share, 1.0, abs_tol=1e-9):
            raise ConfigError(
                f"summer and spring gain shares must sum to 1, got "
                f"{self.summer_gain_share} + {self.spring_gain_share}"
            )

    @property
    def cycle_months(self) -> int:
        return self.summer_months + self.fall_months + self.winter_months + self.spring_months

    def phase_lengths(self) -> Tuple[Tuple[str, int], ...]:
        return (
            ("summer", self.summer_months),
            ("fall", self.fall_months),
            ("winter", self.winter_months),
            ("spring", self.spring_months),
        )


DEFAULT_CYCLE = CyclePolicy()


@dataclass(frozen=True)
class PhaseInfo:
    phase: str
    month_in_phase: int
    months_in_phase: int


@dataclass(frozen=True)
class SeasonalFactors:
    summer: float
    fall: float
    winter: float
    spring: float

    def for_phase(self, phase: str) -> float:
        return getattr(self, phase)


@dataclass(frozen=True)
class PricePath:
    pct_changes: np.ndarray
    phases: Tuple[str, ...]


def phase_for_offset(offset: int, cycle: CyclePolicy = DEFAULT_CYCLE) -> PhaseInfo:
    offset = offset % cycle.cycle_months
    start = 0
    for phase, length in cycle.phase_lengths():
        if offset < start + length:
            return PhaseInfo(phase, offset - start, length)
        start += length
    raise AssertionError("unreachable: offset reduced modulo cycle length")


def seasonal_factors(annual_rate: float, cycle: CyclePolicy = DEFAULT_CYCLE) -> SeasonalFactors:
    """Per-month price factors for each phase given a decimal target annual return."""
    cycle_years = cycle.cycle_months / 12.0
    cycle_return = (1 + annual_rate) ** cycle_years
    net_gain = cycle_return / cycle.target_fall_factor
    return SeasonalFactors(
        summer=net_gain ** (cycle.summer_gain_share / cycle.summer_factor_months),
        fall=cycle.target_fall_factor ** (1.0 / cycle.fall_months),
        winter=1.0,
        spring=net_gain ** (cycle.spring_gain_share / cycle.spring_factor_months),
    )


def cycle_cagr(cycle_number: int, total_cycles: int, initial_cagr: float, final_cagr: Optional[float] = None) -> float:
    """Target CAGR (percent) for one cycle, interpolated toward `final_cagr` for diminishing returns."""
    if final_cagr is None or total_cycles <= 1:
        return initial_cagr
    progress = min(max((cycle_number - 1) / (total_cycles - 1), 0.0), 1.0)
    return max(initial_cagr + (final_cagr - initial_cagr) * progress, MIN_CYCLE_CAGR)


def _sentiment_multiplier(settings: PerformanceSettings, multipliers: Mapping[str, float]) -> float:
    try:
        return float(multipliers[settings.sentiment])
    except KeyError:
        raise ConfigError(
            f"unknown sentiment {settings.sentiment!r}; expected one of {sorted(multipliers)}"
        ) from None


def _constant_monthly_rate(annual_pct: float) -> float:
    return max(1 + annual_pct / 100.0, 0.0) ** (1.0 / 12.0) - 1


def _seasonal_path(settings, months, epochs, cycle, multipliers) -> PricePath:
    multiplier = _sentiment_multiplier(settings, multipliers)
    total_cycles = max(1, math.ceil(months / cycle.cycle_months))
    pct = np.zeros(months)
    phases: List[str] = []
    factor_cache: Dict[float, SeasonalFactors] = {}
    cycle_number = 1
    previous_epoch: Optional[date] = None

    for m in range(months):
        reference = add_months(settings.loan_start_date, m)
        epoch = epochs.last_epoch(reference)
        if previous_epoch is not None and epoch != previous_epoch:
            cycle_number += 1
        previous_epoch = epoch

        info = phase_for_offset(months_between(epoch, reference), cycle)
        phases.append(info.phase)
        if m == 0:
            continue

        rate = cycle_cagr(cycle_number, total_cycles, settings.initial_cagr, settings.final_cagr) * multiplier / 100.0
        factors = factor_cache.get(rate)
        if factors is None:
            factors = factor_cache[rate] = seasonal_factors(rate, cycle)
        pct[m] = factors.for_phase(info.phase) - 1
    return PricePath(pct, tuple(phases))


def _flat_path(monthly_rate: float, months: int) -> PricePath:
    pct = np.full(months, monthly_rate)
    if months:
        pct[0] = 0.0
    return PricePath(pct, (STEADY_PHASE,) * months)


def _steady_path(settings, months, epochs, cycle, multipliers) -> PricePath:
    growth = settings.custom_annual_growth_rate
    if growth is None:
        growth = settings.initial_cagr
    return _flat_path(_constant_monthly_rate(growth * _sentiment_multiplier(settings, multipliers)), months)


def _custom_path(settings, months, epochs, cycle, multipliers) -> PricePath:
    growth = settings.custom_annual_growth_rate
    if growth is None:
        growth = settings.initial_cagr
    return _flat_path(_constant_monthly_rate(growth), months)


_PATH_BUILDERS: Dict[PerformanceModel, Callable[..., PricePath]] = {
    PerformanceModel.SEASONAL: _seasonal_path,
    PerformanceModel.STEADY: _steady_path,
    PerformanceModel.CUSTOM: _custom_path,
}


def price_path(
    settings: PerformanceSettings,
    months: int,
    epochs: EpochCalendar = DEFAULT_EPOCHS,
    cycle: CyclePolicy = DEFAULT_CYCLE,
    sentiment_multipliers: Mapping[str, float] = DEFAULT_SENTIMENT_MULTIPLIERS,
) -> PricePath:
    """Monthly signed price changes (entry 0 is the anchor and always 0) plus each month's phase."""
    builder = _PATH_BUILDERS[PerformanceModel(settings.model)]
    path = builder(settings, months, epochs, cycle, sentiment_multipliers)
    if settings.max_drawdown_percent is not None:
        floor = -abs(settings.max_drawdown_percent) / 100.0
        path = PricePath(np.maximum(path.pct_changes, floor), path.phases)
    return path


def monthly_pct_changes(
    settings: PerformanceSettings,
    months: int,
    epochs: EpochCalendar = DEFAULT_EPOCHS,
    cycle: CyclePolicy = DEFAULT_CYCLE,
    sentiment_multipliers: Mapping[str, float] = DEFAULT_SENTIMENT_MULTIPLIERS,
) -> np.ndarray:
    return price_path(settings, months, epochs, cycle, sentiment_multipliers).pct_changes


def cycle_info(reference: date, epochs: EpochCalendar = DEFAULT_EPOCHS, cycle: CyclePolicy = DEFAULT_CYCLE) -> dict:
    last = epochs.last_epoch(reference)
    upcoming = epochs.next_epoch(reference)
    offset = epochs.cycle_offset(reference, cycle.cycle_months)
    info = phase_for_offset(offset, cycle)
    return {
        "lastEpoch": last.isoformat(),
        "nextEpoch": upcoming.isoformat(),
        "cycleOffset": offset,
        "phase": info.phase,
        "monthInPhase": info.month_in_phase,
        "monthsSinceLastEpoch": months_between(last, reference),
        "monthsToNextEpoch": months_between(reference, upcoming),
    }
