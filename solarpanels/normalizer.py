"""Preparation of sample series for plotting."""

from .models import Sample
from .utils import end_of_day


class SeriesNormalizer:
    """Turns a day's raw samples into the sequence the chart plots.

    Samples must already be ascending by time; producers guarantee this and
    the normalizer does not re-sort. Zero-generation samples (night) are
    ordinary points, not gaps.
    """

    def __init__(self, debug=False):
        """Initialize the normalizer.

        Args:
            debug: Enable debug logging
        """
        self.debug_enabled = debug

    def debug(self, msg):
        """Log debug message if debug mode is enabled."""
        if self.debug_enabled:
            print(msg)

    def normalize(self, samples, reference_date, pad=True):
        """Normalize a series, optionally padding it out to end of day.

        Padding appends a zero-Wh sample at 23:55:00 UTC of the reference
        date so a partial day still spans the whole chart. It is only wanted
        for the "today" series. An empty series is never padded.

        Args:
            samples: Samples ascending by time
            reference_date: date or datetime of the day being plotted
            pad: Append the end-of-day terminal sample

        Returns:
            list: Normalized samples
        """
        normalized = list(samples)
        if not normalized:
            self.debug("normalize: empty series, nothing to pad")
            return normalized

        if pad:
            terminal = Sample(at_utc=end_of_day(reference_date), wh=0.0)
            normalized.append(terminal)
            self.debug(f"normalize: padded {len(samples)} samples to {terminal.at_utc.isoformat()}")

        return normalized
