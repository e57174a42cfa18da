"""Unit tests for KeyedLocks."""

import threading

import pytest

from src.core.errors import ConcurrentModification
from src.core.use_cases.keyed_locks import KeyedLocks


class TestKeyedLocks:

    def test_entries_dropped_after_release(self) -> None:
        locks = KeyedLocks()
        with locks.hold("a"):
            assert len(locks) == 1
        assert len(locks) == 0

    def test_different_keys_do_not_block(self) -> None:
        locks = KeyedLocks(timeout_seconds=0.1)
        with locks.hold("a"):
            with locks.hold("b"):
                assert len(locks) == 2

    def test_timeout_raises(self) -> None:
        locks = KeyedLocks(timeout_seconds=0.05)
        held = threading.Event()
        release = threading.Event()

        def holder():
            with locks.hold("a"):
                held.set()
                release.wait(2)

        t = threading.Thread(target=holder)
        t.start()
        held.wait(2)
        try:
            with pytest.raises(ConcurrentModification):
                with locks.hold("a"):
                    pass
        finally:
            release.set()
            t.join()
        assert len(locks) == 0
