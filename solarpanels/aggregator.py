"""Derived metrics for the summary tiles and series toggles."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from .errors import ConfigError
from .models import Averages
from .utils import utc_now

AVERAGE_WINDOWS = {
    "last_15_mins": timedelta(minutes=15),
    "last_1_hour": timedelta(hours=1),
    "last_3_hours": timedelta(hours=3),
}


@dataclass(frozen=True)
class Totals:
    """Production totals in kWh shown on the today/yesterday toggles."""
    today: float
    yesterday: float


@dataclass(frozen=True)
class TileValues:
    """Full-precision figures for the summary tiles.

    Rounding and grouping are left to whatever renders them.
    """
    current_wh: float
    last_15_mins: Optional[float]
    last_1_hour: Optional[float]
    last_3_hours: Optional[float]
    month_kwh: Optional[float]
    all_time_kwh: Optional[float]


@dataclass(frozen=True)
class Aggregate:
    totals: Totals
    tiles: TileValues


class AveragingStrategy(ABC):
    """Abstract base class for producing the rolling-average tiles.

    The server contract does not always include averages, so how they are
    obtained is pluggable. Each subclass returns an Averages with None for
    any window it cannot fill.
    """

    @abstractmethod
    def averages(self, series_set, snapshot):
        """Get the rolling averages.

        Args:
            series_set: SeriesSet of today's and yesterday's samples
            snapshot: CurrentSnapshot, or None if there is none

        Returns:
            Averages: Average Wh per window
        """
        pass


class SnapshotAverages(AveragingStrategy):
    """Copies the averages the server computed. Computes nothing itself."""

    def averages(self, series_set, snapshot):
        if snapshot is None or snapshot.averages is None:
            return Averages()
        return snapshot.averages


class WindowedAverages(AveragingStrategy):
    """Averages today's samples over trailing windows ending now.

    A window covers samples with now - window < at_utc <= now. The result is
    the arithmetic mean of their wh values.
    """

    def __init__(self, clock=utc_now):
        """Initialize the strategy.

        Args:
            clock: Callable returning the current aware datetime
        """
        self.clock = clock

    def window_average(self, samples, now, window):
        """Mean wh of the samples in (now - window, now], or None if there are none."""
        start = now - window
        in_window = [
            sample.wh for sample in samples
            if start < sample.at_utc <= now
        ]
        if not in_window:
            return None
        return sum(in_window) / len(in_window)

    def averages(self, series_set, snapshot):
        now = self.clock()
        values = {
            name: self.window_average(series_set.today, now, window)
            for name, window in AVERAGE_WINDOWS.items()
        }
        return Averages(**values)


AVERAGING_STRATEGIES = ("snapshot", "windowed")


def averaging_strategy(name, clock=utc_now):
    """Build an averaging strategy from its configuration name.

    Args:
        name: 'snapshot' or 'windowed'
        clock: Callable returning the current aware datetime

    Returns:
        AveragingStrategy: The strategy

    Raises:
        ConfigError: If the name is unknown
    """
    if name == "windowed":
        return WindowedAverages(clock)
    if name == "snapshot":
        return SnapshotAverages()
    raise ConfigError(
        f"unknown averages strategy '{name}', expected one of {sorted(AVERAGING_STRATEGIES)}"
    )


def last_cumulative_kwh(samples):
    """Cumulative kWh of the last sample in a series.

    Returns 0 when the series is empty or its last sample has no cumulative
    figure.
    """
    if not samples:
        return 0.0
    last = samples[-1].cumulative_kwh
    return 0.0 if last is None else last


class MetricsAggregator:
    """Computes the totals and tile values from fetched data."""

    def __init__(self, strategy=None, debug=False):
        """Initialize the aggregator.

        Args:
            strategy: AveragingStrategy, defaults to SnapshotAverages
            debug: Enable debug logging
        """
        self.strategy = strategy if strategy is not None else SnapshotAverages()
        self.debug_enabled = debug

    def debug(self, msg):
        """Log debug message if debug mode is enabled."""
        if self.debug_enabled:
            print(msg)

    def totals(self, series_set, snapshot):
        """Get the today and yesterday totals.

        Snapshot figures win when present; otherwise the last sample's
        cumulative kWh of the matching series is used.
        """
        today = None if snapshot is None else snapshot.today_production_kwh
        yesterday = None if snapshot is None else snapshot.yesterday_production_kwh

        if today is None:
            today = last_cumulative_kwh(series_set.today)
            self.debug(f"totals: today from series = {today}")
        if yesterday is None:
            yesterday = last_cumulative_kwh(series_set.yesterday)
            self.debug(f"totals: yesterday from series = {yesterday}")

        return Totals(today=today, yesterday=yesterday)

    def tiles(self, series_set, snapshot):
        """Get the summary tile values."""
        averages = self.strategy.averages(series_set, snapshot)

        if snapshot is not None:
            current_wh = snapshot.current_production_wh
            month_kwh = snapshot.month_production_kwh
            all_time_kwh = snapshot.all_time_production_kwh
        else:
            current_wh = series_set.today[-1].wh if series_set.today else 0.0
            month_kwh = None
            all_time_kwh = None

        return TileValues(
            current_wh=current_wh,
            last_15_mins=averages.last_15_mins,
            last_1_hour=averages.last_1_hour,
            last_3_hours=averages.last_3_hours,
            month_kwh=month_kwh,
            all_time_kwh=all_time_kwh,
        )

    def aggregate(self, series_set, snapshot):
        """Compute totals and tile values.

        Args:
            series_set: SeriesSet of today's and yesterday's samples
            snapshot: CurrentSnapshot, or None when only the series is available

        Returns:
            Aggregate: Totals and tile values at full precision
        """
        return Aggregate(
            totals=self.totals(series_set, snapshot),
            tiles=self.tiles(series_set, snapshot),
        )
