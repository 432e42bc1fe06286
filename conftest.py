"""
Root conftest.py for pytest configuration

Applies markers based on test location.
"""
from tests.markers import apply_auto_markers


def pytest_collection_modifyitems(config, items):
    """Apply automatic markers based on test location"""
    for item in items:
        apply_auto_markers(item)
