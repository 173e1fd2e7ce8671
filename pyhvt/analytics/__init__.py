"""
Outcome reporting, run statistics and exports.
"""

from .export import export_metrics_json, export_outcomes_csv
from .outcomes import OutcomeBook
from .statistics import RunStatistics
from .trade_log import TradeLogReporter

__all__ = [
    "OutcomeBook",
    "RunStatistics",
    "TradeLogReporter",
    "export_outcomes_csv",
    "export_metrics_json",
]
