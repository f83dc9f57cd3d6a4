from simsched.events import EventQueue
from simsched.models import EventType, Process


def _p(pid):
    return Process(pid, arrival_time=0.0, burst_time=1.0)


def test_events_pop_by_time_then_schedule_order():
    q = EventQueue()
    q.schedule(2.0, EventType.ARRIVAL, _p("late"))
    q.schedule(1.0, EventType.ARRIVAL, _p("first"))
    q.schedule(1.0, EventType.COMPLETION, _p("second"))

    assert q.peek_time() == 1.0
    assert [q.pop().process.pid for _ in range(3)] == ["first", "second", "late"]
    assert q.pop() is None
    assert q.peek_time() is None


def test_cancelled_events_are_skipped():
    q = EventQueue()
    doomed = q.schedule(1.0, EventType.COMPLETION, _p("A"))
    q.schedule(3.0, EventType.ARRIVAL, _p("B"))
    q.cancel(doomed)
    q.cancel(doomed)

    assert len(q) == 1
    assert q.peek_time() == 3.0
    assert q.pop().process.pid == "B"
    assert len(q) == 0
