"""
Module containing configuration functions for Pytest.
"""

import os
import glob
import pytest


@pytest.fixture(scope="session", autouse=True)
def cleanup_test_files():
    """Cleanup generated test files after the test session."""
    yield  # Let the tests run first

    current_dir = os.getcwd()
    patterns = [os.path.join(current_dir, "FluidEqTimings.log")]

    for pattern in patterns:
        for file_path in glob.glob(pattern):
            try:
                os.remove(file_path)
                print(f"Deleted: {file_path}")
            except OSError as e:
                print(f"Error deleting file {file_path}: {e}")
