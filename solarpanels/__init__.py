"""Solar panel generation telemetry package.

This package fetches solar generation history and production snapshots and
prepares the summary figures and chart series for display.
"""

from .models import Sample, SeriesSet, Averages, CurrentSnapshot
from .normalizer import SeriesNormalizer
from .aggregator import (
    MetricsAggregator,
    AveragingStrategy,
    SnapshotAverages,
    WindowedAverages,
    Totals,
    TileValues
)
from .viewmodel import ChartViewModel, ChartState
from .client import SolarPanelsClient, UVClient

__all__ = [
    'Sample',
    'SeriesSet',
    'Averages',
    'CurrentSnapshot',
    'SeriesNormalizer',
    'MetricsAggregator',
    'AveragingStrategy',
    'SnapshotAverages',
    'WindowedAverages',
    'Totals',
    'TileValues',
    'ChartViewModel',
    'ChartState',
    'SolarPanelsClient',
    'UVClient'
]
