"""
Export stages: category discovery, record fetch, reconciliation, author
aggregation and the pipeline controller that runs them in order.
"""

from wpexport.export.aggregator import AggregateResult, Aggregator
from wpexport.export.discovery import BASELINE_CATEGORIES, CategoryDiscovery, DiscoveryResult
from wpexport.export.fetcher import FetchReport, RecordFetcher
from wpexport.export.pipeline import ExportPipeline
from wpexport.export.reconcile import ReconcileStats, ReconciliationEngine
from wpexport.export.summary import RunSummary

__all__ = [
    "AggregateResult",
    "Aggregator",
    "BASELINE_CATEGORIES",
    "CategoryDiscovery",
    "DiscoveryResult",
    "ExportPipeline",
    "FetchReport",
    "ReconcileStats",
    "ReconciliationEngine",
    "RecordFetcher",
    "RunSummary",
]
