"""
Analysis - brand mentions, sentiment, competitors and metrics.
"""

from .brand_mention import BrandMentionDetector, TextStats, extract_text_stats
from .competitor import CompetitorDetector
from .engine import AnalysisEngine
from .metrics import (
    build_summary,
    calculate_category_metrics,
    calculate_visibility_score,
    perform_competitive_analysis,
    time_series_point,
)
from .sentiment import SentimentAnalyzer

__all__ = [
    "BrandMentionDetector",
    "TextStats",
    "extract_text_stats",
    "CompetitorDetector",
    "AnalysisEngine",
    "build_summary",
    "calculate_category_metrics",
    "calculate_visibility_score",
    "perform_competitive_analysis",
    "time_series_point",
    "SentimentAnalyzer",
]
