"""Shared fixtures for the adopr-helper test suite."""

from adopr_helper.testing.conftest import (  # noqa: F401
    config_store,
    fake_ado,
    settings,
    vault,
)
