"""
Global test configuration for MedSim Guard.
"""

import pytest
from fastapi.testclient import TestClient

from medsim.main import app


@pytest.fixture
def client():
    """Test client for the MedSim app (runs the app lifespan)."""
    with TestClient(app) as test_client:
        yield test_client


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "api: API boundary tests")


def pytest_collection_modifyitems(config, items):
    """Auto-mark tests based on location."""
    _ = config

    for item in items:
        test_path = str(item.fspath)

        # Mark by directory
        if "/unit/" in test_path or "\\unit\\" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path or "\\integration\\" in test_path:
            item.add_marker(pytest.mark.integration)

        if "/api/" in test_path or "\\api\\" in test_path:
            item.add_marker(pytest.mark.api)
