from __future__ import annotations

from collections.abc import Iterator

import pytest

from callbridge import reset


@pytest.fixture(autouse=True)
def restore_bridge_state() -> Iterator[None]:
    reset()
    yield
    reset()
