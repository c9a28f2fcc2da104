from __future__ import annotations

from collections.abc import Iterator

import pytest
import sqlalchemy as sa

from store_nl2sql.services.service_manager import ChatServiceManager
from tests.support import make_engine, seed


@pytest.fixture
def store_engine() -> Iterator[sa.Engine]:
    engine = make_engine()
    seed(engine)
    yield engine
    engine.dispose()


@pytest.fixture(autouse=True)
def _reset_manager() -> Iterator[None]:
    ChatServiceManager.reset_instance()
    yield
    ChatServiceManager.reset_instance()
