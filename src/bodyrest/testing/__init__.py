"""Test utilities for bodyrest applications.

    from bodyrest.testing import TestClient, encode_multipart
"""

from bodyrest.testing.client import TestClient, encode_multipart

__all__ = [
    "TestClient",
    "encode_multipart",
]
