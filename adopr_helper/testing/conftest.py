"""
Pytest plugin for adopr-helper testing fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["adopr_helper.testing.conftest"]
"""

from adopr_helper.testing.fixtures import config_store, fake_ado, settings, vault

__all__ = [
    "config_store",
    "settings",
    "vault",
    "fake_ado",
]
