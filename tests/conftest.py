import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Select the storefront environment before any settings are read. Sessions
    leave the root logger alone unless a test asks for it.
    """
    os.environ["STOREFRONT_ENV"] = session.config.option.env
    os.environ["STOREFRONT_CONFIGURE_LOGS"] = "false"


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to reset process-wide adapters after every test"""
    yield

    from storefront.auth import reset_auth_gate
    from storefront.config import get_settings
    from storefront.gateway import reset_order_client

    reset_auth_gate()
    reset_order_client()
    get_settings.cache_clear()
