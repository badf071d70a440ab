"""Test fixtures for RuntimeKit tests.

Fixtures are organized by type:

- archives: In-memory runtime archives (tar.gz with a single top-level directory)
- projects: Source trees with and without go.mod
"""

__all__ = [
    "archives",
    "projects",
]
