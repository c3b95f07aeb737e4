"""Shared test configuration."""

from tests.mock_utils import patch_mockfirestore


def pytest_configure(config):
    """Patch mockfirestore once before any test module is imported."""
    patch_mockfirestore()
