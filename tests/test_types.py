from micro_sre.analysis.types import Deadline


def test_deadline_counts_down() -> None:
    now = [10.0]
    deadline = Deadline.after(5, clock=lambda: now[0])
    assert deadline.remaining() == 5
    assert not deadline.expired
    now[0] = 16.0
    assert deadline.remaining() == 0
    assert deadline.expired


def test_never_deadline() -> None:
    deadline = Deadline.never()
    assert not deadline.expired
    assert deadline.remaining() == float("inf")
