from __future__ import annotations

import pytest

from adamon.core.buffers import WindowBuffer


def test_window_buffer_drains_at_target() -> None:
    buf: WindowBuffer[int] = WindowBuffer(target=3)
    assert buf.add(1) is None
    assert buf.add(2) is None
    assert buf.size() == 2
    assert buf.add(3) == [1, 2, 3]
    assert buf.size() == 0


def test_window_buffer_target_change() -> None:
    buf: WindowBuffer[int] = WindowBuffer(target=2)
    buf.set_target(1)
    assert buf.add(7) == [7]
    assert buf.target() == 1
    with pytest.raises(ValueError):
        buf.set_target(0)
