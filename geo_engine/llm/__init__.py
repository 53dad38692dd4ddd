"""
LLM client used for category and prompt synthesis.
"""

from .client import ClaudeClient, CompletionResponse, TokenUsage
from .parsing import extract_json

__all__ = ["ClaudeClient", "CompletionResponse", "TokenUsage", "extract_json"]
