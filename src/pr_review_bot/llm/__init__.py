"""
LLM Review Engine

This module provides the Ollama client, the review prompt and the
engine that classifies model replies into findings.
"""

from .client import OllamaClient, LLMClientError
from .prompts import PromptBuilder
from .engine import LLMReviewEngine, classify_response

__all__ = ['OllamaClient', 'LLMClientError', 'PromptBuilder', 'LLMReviewEngine', 'classify_response']
