"""Today/yesterday chart state handed to the rendering layer."""

from dataclasses import dataclass
from typing import Tuple

from .aggregator import MetricsAggregator, TileValues, Totals
from .normalizer import SeriesNormalizer
from .utils import end_of_day, to_epoch_ms, utc_now

TODAY = "today"
YESTERDAY = "yesterday"
SERIES_NAMES = (TODAY, YESTERDAY)

AUTO = "auto"

# Standard UV index range, plotted on its own hidden axis
UV_AXIS_DOMAIN = (0, 13)


@dataclass(frozen=True)
class ChartState:
    """Everything a renderer needs to draw the tiles and the chart."""
    active_series: str
    active_data: Tuple
    x_axis_domain: Tuple
    totals: Totals
    tiles: TileValues
    has_uv: bool
    uv_axis_domain: Tuple[int, int] = UV_AXIS_DOMAIN

    def to_json(self):
        return {
            "activeSeries": self.active_series,
            "activeData": [sample.to_json() for sample in self.active_data],
            "xAxisDomain": list(self.x_axis_domain),
            "totals": {
                TODAY: self.totals.today,
                YESTERDAY: self.totals.yesterday,
            },
            "tiles": {
                "currentWh": self.tiles.current_wh,
                "last15Mins": self.tiles.last_15_mins,
                "last1Hour": self.tiles.last_1_hour,
                "last3Hours": self.tiles.last_3_hours,
                "monthKwh": self.tiles.month_kwh,
                "allTimeKwh": self.tiles.all_time_kwh,
            },
            "uv": {
                "enabled": self.has_uv,
                "domain": list(self.uv_axis_domain),
            },
        }


class ChartViewModel:
    """Holds which series is selected and derives the plot-ready data.

    The selection starts at "today" and only changes through select(). It is
    owned by whoever renders the view and is not persisted. Totals and tiles
    are computed once, since the fetched inputs never change for the life of
    the view.
    """

    def __init__(self, series_set, snapshot, aggregator=None, normalizer=None, clock=utc_now):
        """Initialize the view model.

        Args:
            series_set: SeriesSet fetched from /history
            snapshot: CurrentSnapshot fetched from /current, or None
            aggregator: MetricsAggregator, defaults to snapshot averages
            normalizer: SeriesNormalizer
            clock: Callable returning the current aware datetime
        """
        self.series_set = series_set
        self.snapshot = snapshot
        self.normalizer = normalizer if normalizer is not None else SeriesNormalizer()
        self.clock = clock
        self.active_series = TODAY

        aggregate = (aggregator or MetricsAggregator()).aggregate(series_set, snapshot)
        self.totals = aggregate.totals
        self.tiles = aggregate.tiles

    def select(self, series_name):
        """Make a series the active one.

        Args:
            series_name: 'today' or 'yesterday'

        Raises:
            ValueError: If series_name is not one of the two series
        """
        if series_name not in SERIES_NAMES:
            raise ValueError(f"unknown series '{series_name}', expected one of {SERIES_NAMES}")
        self.active_series = series_name

    @property
    def active_data(self):
        """Samples to plot for the active series.

        Today's series is padded to 23:55 UTC of the current date; yesterday's
        is returned as fetched.
        """
        if self.active_series == TODAY:
            return self.normalizer.normalize(self.series_set.today, self.clock(), pad=True)
        return self.normalizer.normalize(self.series_set.yesterday, self.clock(), pad=False)

    @property
    def x_axis_domain(self):
        """Time-axis bounds in epoch ms, with 'auto' meaning fit to the data.

        For today the upper bound is pinned to the end of the current UTC day
        so the axis does not rescale as samples arrive.
        """
        if self.active_series == TODAY:
            return (AUTO, to_epoch_ms(end_of_day(self.clock())))
        return (AUTO, AUTO)

    @property
    def has_uv(self):
        """True if any sample of the active series carries a UV level."""
        series = self.series_set.today if self.active_series == TODAY else self.series_set.yesterday
        return any(sample.uv_level is not None for sample in series)

    @property
    def uv_axis_domain(self):
        """Fixed 0-13 domain of the hidden UV index axis."""
        return UV_AXIS_DOMAIN

    def state(self):
        """Snapshot the current state as a ChartState."""
        return ChartState(
            active_series=self.active_series,
            active_data=tuple(self.active_data),
            x_axis_domain=self.x_axis_domain,
            totals=self.totals,
            tiles=self.tiles,
            has_uv=self.has_uv,
        )
