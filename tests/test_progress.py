"""Tests for BuildProgress thread-safe progress tracking."""

import threading

from lexistore.build.progress import BuildProgress, CancellationToken
from lexistore.core.models import BuildState


class TestBuildProgress:
    """Test BuildProgress dataclass."""

    def test_initial_state(self):
        """Fresh instance has zeros and idle state."""
        snap = BuildProgress().snapshot()
        assert snap == {
            "total_steps": 0,
            "current_step": 0,
            "state": "idle",
            "cancelled": False,
            "fraction": 0.0,
        }

    def test_begin_with_head_start(self):
        p = BuildProgress()
        p.begin(total_steps=101, start_step=1)
        assert p.total_steps == 101
        assert p.current_step == 1
        assert p.state == BuildState.IDLE

    def test_begin_clamps_head_start(self):
        p = BuildProgress()
        p.begin(total_steps=10, start_step=50)
        assert p.current_step == 10

    def test_advance_returns_current(self):
        p = BuildProgress()
        p.begin(total_steps=100)
        assert p.advance(5) == 5
        assert p.advance() == 6

    def test_advance_clamped_to_total(self):
        p = BuildProgress()
        p.begin(total_steps=10)
        p.advance(7)
        p.advance(7)
        assert p.current_step == 10

    def test_advance_never_decreases(self):
        p = BuildProgress()
        p.begin(total_steps=10)
        p.advance(4)
        p.advance(-3)
        assert p.current_step == 4

    def test_finish(self):
        p = BuildProgress()
        p.begin(total_steps=80)
        p.advance(12)
        p.finish()
        snap = p.snapshot()
        assert snap["current_step"] == 80
        assert snap["fraction"] == 1.0
        assert snap["state"] == "done"

    def test_mark_cancelled(self):
        p = BuildProgress()
        p.begin(total_steps=10)
        p.set_state(BuildState.WORDS_INSERTED)
        p.mark_cancelled()
        snap = p.snapshot()
        assert snap["cancelled"] is True
        assert snap["state"] == "cancelled"

    def test_begin_resets_cancelled(self):
        p = BuildProgress()
        p.mark_cancelled()
        p.begin(total_steps=10)
        assert p.cancelled is False

    def test_snapshot_is_a_copy(self):
        p = BuildProgress()
        p.begin(total_steps=10)
        snap = p.snapshot()
        p.advance(3)
        assert snap["current_step"] == 0

    def test_concurrent_advance(self):
        """Advances from many threads are all counted."""
        p = BuildProgress()
        p.begin(total_steps=10_000)

        def worker():
            for _ in range(500):
                p.advance()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert p.current_step == 4000


class TestCancellationToken:
    """Cooperative stop requests."""

    def test_cancel(self):
        token = CancellationToken()
        assert token.cancelled is False
        token.cancel()
        assert token.cancelled is True

    def test_cancel_from_other_thread(self):
        token = CancellationToken()
        t = threading.Thread(target=token.cancel)
        t.start()
        t.join()
        assert token.cancelled
