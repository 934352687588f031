"""Application layer package."""

from .analysis_service import AnalysisResult, analyze_frame, run_content_analysis
from .classification_service import ClassificationError, collect_classifications
from .report_service import ReportOutputs, run_reporting_pipeline

__all__ = [
    "AnalysisResult",
    "analyze_frame",
    "run_content_analysis",
    "ClassificationError",
    "collect_classifications",
    "ReportOutputs",
    "run_reporting_pipeline",
]
