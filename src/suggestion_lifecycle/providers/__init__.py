"""Suggestions backend providers."""

from suggestion_lifecycle.providers.suggestion_api import SuggestionApi
from suggestion_lifecycle.providers.http_provider import HttpSuggestionApi
from suggestion_lifecycle.providers.stub_provider import StubSuggestionApi, StubPortfolio

__all__ = [
    "SuggestionApi",
    "HttpSuggestionApi",
    "StubSuggestionApi",
    "StubPortfolio",
]
