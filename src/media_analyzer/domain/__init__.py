"""Domain models and enums for Media Analyzer.

Usage:
    from media_analyzer.domain import AnalysisOk, AnalysisFailed, MediaKind
"""

from .enums import MediaKind
from .models import (
    AnalysisFailed,
    AnalysisOk,
    AnalysisRecord,
    AudioInfo,
    ContainerInfo,
    FileStat,
    Number,
    VideoInfo,
    record_from_dict,
)

__all__ = [
    # Models
    "AnalysisFailed",
    "AnalysisOk",
    "AnalysisRecord",
    "AudioInfo",
    "ContainerInfo",
    "FileStat",
    "VideoInfo",
    "record_from_dict",
    # Type aliases
    "Number",
    # Enums
    "MediaKind",
]
