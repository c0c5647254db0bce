"""Test helper utilities."""

from tests.helpers.http import json_response, text_response

__all__ = [
    "json_response",
    "text_response",
]
