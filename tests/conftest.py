"""
Pytest configuration and fixtures.

This file is automatically loaded by pytest and provides
shared fixtures for all tests.
"""

import pytest

from featuregate.registry import FeatureRegistry


@pytest.fixture
def registry():
    """
    Registry with the features of a small file sharing site.

    "Files" covers two whole controllers, "Wiki" covers one controller plus
    the users#my_pages action.
    """
    registry = FeatureRegistry()
    registry.add_feature("Files", ["files", "file_comments"])
    registry.add_feature("Wiki", ["wiki"], [{"controller": "users", "action": "my_pages"}])
    return registry


class DenialRecorder:
    """Denial handler remembering the features it was called with."""

    def __init__(self, result="denied"):
        self.calls = []
        self.result = result

    def __call__(self, feature_name):
        self.calls.append(feature_name)
        return self.result


@pytest.fixture
def denials():
    return DenialRecorder()
