"""Data models for solar generation telemetry."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from .errors import PayloadError
from .utils import format_timestamp, parse_timestamp, to_epoch_ms

# Upstream has used all of these names for the observation time
TIMESTAMP_KEYS = ("atUtc", "jsAt", "at")
CUMULATIVE_KEYS = ("cumulativeKwh", "cummalativeKwh")


def _first_present(data, keys):
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _optional_float(value):
    return None if value is None else float(value)


def _required(data, key):
    try:
        return data[key]
    except (KeyError, TypeError) as e:
        raise PayloadError(f"missing field '{key}'") from e


def _parse_series(data, key):
    raw = data.get(key) or ()
    if not isinstance(raw, (list, tuple)):
        raise PayloadError(f"'{key}' must be a list of samples, got {type(raw).__name__}")
    return tuple(Sample.from_json(s) for s in raw)


@dataclass(frozen=True)
class Sample:
    """A single generation observation.

    timestamp_ms is always derived from at_utc and cannot be supplied.
    """
    at_utc: datetime
    wh: float
    cumulative_kwh: Optional[float] = None
    uv_level: Optional[float] = None
    timestamp_ms: int = field(init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "timestamp_ms", to_epoch_ms(self.at_utc))

    @classmethod
    def from_json(cls, data):
        """Build a sample from one element of the history payload.

        Args:
            data: Decoded JSON object

        Returns:
            Sample: Parsed sample

        Raises:
            PayloadError: If the timestamp or wh value is missing or unparseable
        """
        if not isinstance(data, dict):
            raise PayloadError(f"sample must be an object, got {type(data).__name__}")
        raw_at = _first_present(data, TIMESTAMP_KEYS)
        if raw_at is None:
            raise PayloadError(f"sample has no timestamp: {data!r}")
        try:
            return cls(
                at_utc=parse_timestamp(raw_at),
                wh=float(_required(data, "wh")),
                cumulative_kwh=_optional_float(_first_present(data, CUMULATIVE_KEYS)),
                uv_level=_optional_float(data.get("uvLevel")),
            )
        except (TypeError, ValueError) as e:
            raise PayloadError(f"malformed sample {data!r}: {e}") from e

    def to_json(self):
        data = {
            "atUtc": format_timestamp(self.at_utc),
            "timestamp": self.timestamp_ms,
            "wh": self.wh,
        }
        if self.cumulative_kwh is not None:
            data["cumulativeKwh"] = self.cumulative_kwh
        if self.uv_level is not None:
            data["uvLevel"] = self.uv_level
        return data


@dataclass(frozen=True)
class SeriesSet:
    """Today's and yesterday's samples, each ascending by time."""
    today: Tuple[Sample, ...] = ()
    yesterday: Tuple[Sample, ...] = ()

    @classmethod
    def from_json(cls, data):
        """Parse the /history payload. A missing series is treated as empty."""
        if not isinstance(data, dict):
            raise PayloadError(f"history payload must be an object, got {type(data).__name__}")
        return cls(
            today=_parse_series(data, "today"),
            yesterday=_parse_series(data, "yesterday"),
        )


@dataclass(frozen=True)
class Averages:
    """Rolling generation averages in Wh."""
    last_15_mins: Optional[float] = None
    last_1_hour: Optional[float] = None
    last_3_hours: Optional[float] = None


@dataclass(frozen=True)
class CurrentSnapshot:
    """Point-in-time production summary from the /current endpoint."""
    current_production_wh: float
    today_production_kwh: float
    month_production_kwh: float
    all_time_production_kwh: float
    yesterday_production_kwh: Optional[float] = None
    averages: Optional[Averages] = None

    @classmethod
    def from_json(cls, data):
        """Parse the /current payload.

        yesterdayProductionKwh and statistics.averages are optional, since
        not every server revision sends them.

        Args:
            data: Decoded JSON object

        Returns:
            CurrentSnapshot: Parsed snapshot

        Raises:
            PayloadError: If a required figure is missing or not numeric
        """
        if not isinstance(data, dict):
            raise PayloadError(f"current payload must be an object, got {type(data).__name__}")

        statistics = data.get("statistics") or {}
        if not isinstance(statistics, dict):
            raise PayloadError(f"statistics must be an object, got {type(statistics).__name__}")
        raw_averages = statistics.get("averages")
        if raw_averages and not isinstance(raw_averages, dict):
            raise PayloadError(f"statistics.averages must be an object, got {type(raw_averages).__name__}")

        try:
            averages = None
            if raw_averages:
                averages = Averages(
                    last_15_mins=_optional_float(raw_averages.get("last15Mins")),
                    last_1_hour=_optional_float(raw_averages.get("last1Hour")),
                    last_3_hours=_optional_float(raw_averages.get("last3Hours")),
                )
            return cls(
                current_production_wh=float(_required(data, "currentProductionWh")),
                today_production_kwh=float(_required(data, "todayProductionKwh")),
                month_production_kwh=float(_required(data, "monthProductionKwh")),
                all_time_production_kwh=float(_required(data, "allTimeProductionKwh")),
                yesterday_production_kwh=_optional_float(data.get("yesterdayProductionKwh")),
                averages=averages,
            )
        except (TypeError, ValueError) as e:
            raise PayloadError(f"malformed current payload: {e}") from e
