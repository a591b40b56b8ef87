"""Test utilities for sqlroute applications::

    from sqlroute.testing import TestClient, assert_success
"""

from sqlroute.testing.assertions import assert_failure, assert_success
from sqlroute.testing.client import TestClient

__all__ = ["TestClient", "assert_failure", "assert_success"]
