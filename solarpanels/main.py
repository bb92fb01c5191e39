"""Main entry point and command-line interface for the solar panels view."""

import argparse
import json
import sys

from .aggregator import MetricsAggregator, averaging_strategy
from .client import SolarPanelsClient, UVClient
from .config import load_config
from .errors import SolarPanelsError
from .normalizer import SeriesNormalizer
from .viewmodel import ChartViewModel, TODAY, YESTERDAY

SERIES_LABELS = {TODAY: "Today", YESTERDAY: "Yesterday"}


def format_wh(value):
    """Format a Wh tile with no decimals, or '-' when there is no value."""
    if value is None:
        return "-"
    return f"{value:.0f} Wh"


def format_kwh(value):
    """Format a kWh total with thousands grouping and at most 3 decimals."""
    if value is None:
        return "-"
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return f"{text} kWh"


def render_text(state, uv_level=None):
    """Render a ChartState as plain text lines.

    Args:
        state: ChartState from ChartViewModel.state()
        uv_level: Optional current UV index to show as a tile

    Returns:
        list: Lines of text
    """
    tiles = state.tiles
    lines = [
        "Solar panels",
        f"  Current:          {format_wh(tiles.current_wh)}",
        f"  15 minutes (avg): {format_wh(tiles.last_15_mins)}",
        f"  1 hour (avg):     {format_wh(tiles.last_1_hour)}",
        f"  3 hours (avg):    {format_wh(tiles.last_3_hours)}",
        f"  Month:            {format_kwh(tiles.month_kwh)}",
        f"  All Time:         {format_kwh(tiles.all_time_kwh)}",
    ]
    if uv_level is not None:
        lines.append(f"  UV index:         {uv_level:.1f}")

    toggles = []
    for name in (TODAY, YESTERDAY):
        label = f"{SERIES_LABELS[name]} {format_kwh(getattr(state.totals, name))}"
        toggles.append(f"[{label}]" if name == state.active_series else f" {label} ")
    lines += ["", "Solar Generation (24hr)", "  " + " | ".join(toggles)]

    if not state.active_data:
        lines.append("  no data")
    for sample in state.active_data:
        row = f"  {sample.at_utc:%H:%M} UTC  {sample.wh:>8.0f} Wh"
        if state.has_uv and sample.uv_level is not None:
            row += f"  UV {sample.uv_level:.1f}"
        lines.append(row)

    return lines


class SolarPanels:
    """Coordinates fetching, aggregation and the chart view model."""

    def __init__(self, config, debug=False) -> None:
        """Initialize the view.

        Args:
            config: Configuration dictionary from load_config()
            debug: Enable debug logging
        """
        self.config = config
        self.debug_enabled = debug
        self.client = SolarPanelsClient(config["api_base_url"], config["timeout"], debug)
        self.view_model = None

    def debug(self, msg):
        """Log debug message if debug mode is enabled."""
        if self.debug_enabled:
            print(msg)

    def load(self):
        """Fetch history and the current snapshot, then build the view model.

        Returns:
            ChartViewModel: View model over the fetched data
        """
        series_set, snapshot = self.client.load(self.config["deadline"])
        aggregator = MetricsAggregator(averaging_strategy(self.config["averages"]), self.debug_enabled)
        self.view_model = ChartViewModel(
            series_set,
            snapshot,
            aggregator=aggregator,
            normalizer=SeriesNormalizer(self.debug_enabled),
        )
        self.debug(f"load: totals={self.view_model.totals}")
        return self.view_model

    def current_uv_level(self):
        """Get the current UV index for the configured location."""
        uv_client = UVClient(self.config["timeout"], self.debug_enabled)
        try:
            return uv_client.get_uv_level(self.config["uv_location"])
        finally:
            uv_client.close()

    def close(self):
        """Close the client session."""
        self.client.close()


def main(argv=None):
    """Main entry point."""
    # Make stdout line-buffered (i.e. each line will be automatically flushed):
    sys.stdout.reconfigure(line_buffering=True)

    parser = argparse.ArgumentParser(description='Solar panel generation view')
    parser.add_argument('--config', help='Path to solarpanels.json')
    parser.add_argument('--yesterday', action='store_true',
                        help='Show the yesterday series instead of today')
    parser.add_argument('--json', action='store_true',
                        help='Print the chart state as JSON')
    parser.add_argument('--uv', action='store_true',
                        help='Also fetch the current UV index')
    parser.add_argument('--debug', action='store_true',
                        help='Print debug messages')
    args = parser.parse_args(argv)

    solar_panels = None
    try:
        config = load_config(args.config)
        solar_panels = SolarPanels(config, debug=args.debug)
        view_model = solar_panels.load()
        if args.yesterday:
            view_model.select(YESTERDAY)
        uv_level = solar_panels.current_uv_level() if args.uv else None

        state = view_model.state()
        if args.json:
            data = state.to_json()
            if args.uv:
                data["uv"]["current"] = uv_level
            print(json.dumps(data, indent=2))
        else:
            print("\n".join(render_text(state, uv_level)))
    except SolarPanelsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if solar_panels is not None:
            solar_panels.close()

    return 0


if __name__=="__main__":
    sys.exit(main())
