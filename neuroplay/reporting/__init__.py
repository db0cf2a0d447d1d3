"""Reporting utilities for neuroplay."""

from .artifacts import write_manifest
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import build_summary, loss_trend, moving_average, write_summary

__all__ = [
    "CsvSink",
    "JsonlSink",
    "PlotAdapter",
    "build_summary",
    "loss_trend",
    "moving_average",
    "write_manifest",
    "write_summary",
]
