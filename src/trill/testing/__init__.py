"""Test utilities for trill applications.

Provides an in-process ASGI test client and Content-Type assertions::

    from trill.testing import TestClient, assert_format
"""

from trill.testing.assertions import assert_charset, assert_format
from trill.testing.client import TestClient

__all__ = [
    "TestClient",
    "assert_charset",
    "assert_format",
]
