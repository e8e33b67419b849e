"""Test utilities for junction dispatchers.

    from junction.testing import TestClient
"""

from junction.testing.client import TestClient, TestResponse

__all__ = ["TestClient", "TestResponse"]
