"""
Answer execution - web-search-backed answers per prompt.
"""

from .client import ResponsesClient, RetryConfig
from .executor import AnswerExecutor, dummy_response
from .parser import extract_citations, extract_output_text

__all__ = [
    "ResponsesClient",
    "RetryConfig",
    "AnswerExecutor",
    "dummy_response",
    "extract_citations",
    "extract_output_text",
]
