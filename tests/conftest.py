"""Fixtures for the SmartThings HomeKit tests."""

import pytest

from tests.support.device_helpers import make_driver


@pytest.fixture
def hk_driver():
    return make_driver()
