"""Fixtures and markers for the end-to-end workout tests."""

import pytest


def pytest_collection_modifyitems(items):
    """Tag everything under integration_tests so it can be deselected with -m."""
    for item in items:
        if "integration_tests" in str(item.path):
            item.add_marker(pytest.mark.integration)
