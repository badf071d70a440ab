"""
Mock implementations for testing RuntimeKit components.

This package provides fakes for the HTTP transport and archive extractor so
pipeline tests never touch the network or spawn processes.
"""

from .network import FakeExtractor, FakeHttpClient

__all__ = [
    "FakeExtractor",
    "FakeHttpClient",
]
