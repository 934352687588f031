"""Content tiering package."""

from .aggregation import aggregate, with_contributions
from .application import AnalysisResult, collect_classifications, run_content_analysis, run_reporting_pipeline
from .discover import DiscoverResult, DiscoverSubsetAnalyzer
from .ingestion import read_classifications, read_metric_rows, write_output_excel
from .merger import merge_rows
from .tiering import TierClassifier

__all__ = [
    "aggregate",
    "with_contributions",
    "merge_rows",
    "TierClassifier",
    "DiscoverSubsetAnalyzer",
    "DiscoverResult",
    "read_metric_rows",
    "read_classifications",
    "write_output_excel",
    "AnalysisResult",
    "run_content_analysis",
    "collect_classifications",
    "run_reporting_pipeline",
]
