import os

import pytest
from faker import Faker

os.environ.setdefault("EDGY_SETTINGS_MODULE", "tests.settings.default.TestSettings")


@pytest.fixture(scope="module")
def anyio_backend():
    return ("asyncio", {"debug": True})


@pytest.fixture(scope="session")
def faker() -> Faker:
    return Faker()
