"""adopr-helper testing utilities.

Provides a fake Azure DevOps service and fixtures for testing code that
uses adopr-helper.
"""

from adopr_helper.testing.fixtures import TEST_TOKEN, make_fingerprint, make_vault
from adopr_helper.testing.mock import FakeAzureDevOps, RecordedRequest

__all__ = [
    "FakeAzureDevOps",
    "RecordedRequest",
    "TEST_TOKEN",
    "make_fingerprint",
    "make_vault",
]
