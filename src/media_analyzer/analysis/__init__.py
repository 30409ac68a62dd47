"""Analysis pipeline for Media Analyzer.

- normalize_analysis / build_error_record: Metadata Normalizer
- analyze_files / analyze_all / lookup_stored: batch and bulk pipeline
- InFlightGuard: per-path in-flight tracking
- build_dashboard: Dashboard Aggregator
- compare_analyses: Comparator
"""

from media_analyzer.analysis.compare import (
    COMPARE_FIELDS,
    Comparison,
    compare_analyses,
)
from media_analyzer.analysis.dashboard import (
    DIMENSIONS,
    UNKNOWN_KEY,
    CountItem,
    Dashboard,
    DashboardTotals,
    ValueRange,
    build_dashboard,
)
from media_analyzer.analysis.normalizer import (
    NOT_A_FILE_ERROR,
    build_error_record,
    normalize_analysis,
)
from media_analyzer.analysis.pipeline import (
    NOT_ANALYZED_ERROR,
    AnalyzeAllResult,
    AnalyzeResult,
    InFlightGuard,
    LookupResult,
    analyze_all,
    analyze_and_store,
    analyze_file,
    analyze_files,
    lookup_stored,
)

__all__ = [
    # Comparator
    "COMPARE_FIELDS",
    "Comparison",
    "compare_analyses",
    # Dashboard
    "DIMENSIONS",
    "UNKNOWN_KEY",
    "CountItem",
    "Dashboard",
    "DashboardTotals",
    "ValueRange",
    "build_dashboard",
    # Normalizer
    "NOT_A_FILE_ERROR",
    "build_error_record",
    "normalize_analysis",
    # Pipeline
    "NOT_ANALYZED_ERROR",
    "AnalyzeAllResult",
    "AnalyzeResult",
    "InFlightGuard",
    "LookupResult",
    "analyze_all",
    "analyze_and_store",
    "analyze_file",
    "analyze_files",
    "lookup_stored",
]
