"""Call escalation policy tests, driven by synthetic scheduler ticks."""

from wsafe.services.call_escalator import CallEscalator
from wsafe.services.contact_service import ContactEntry

A = ContactEntry(id=1, name="A", phone="555-0001")
B = ContactEntry(id=2, name="B", phone="555-0002")
C = ContactEntry(id=3, name="C", phone="555-0003")


def _escalator(dialer, scheduler, contacts):
    return CallEscalator(dialer, lambda: list(contacts), scheduler, retry_delay=30, max_attempts=3)


async def test_three_unanswered_cycles_rotate_to_next_contact(dialer, scheduler):
    """[A, B, C] starting at A: three re-checks move to B, three more to C."""
    esc = _escalator(dialer, scheduler, [A, B, C])
    await esc.start(A)
    assert dialer.calls == ["555-0001"]

    await scheduler.advance(30)
    await scheduler.advance(30)
    assert esc.target == A
    assert esc.calls_made == 3

    await scheduler.advance(30)
    assert esc.target == B
    assert esc.attempt == 0
    assert dialer.calls == ["555-0001"] * 3 + ["555-0002"]

    await scheduler.advance(90)
    assert esc.target == C
    assert dialer.calls[-1] == "555-0003"
    assert len(dialer.calls) == 7


async def test_rotation_wraps_to_start_of_store(dialer, scheduler):
    esc = _escalator(dialer, scheduler, [A, B, C])
    await esc.start(C)

    await scheduler.advance(90)

    assert esc.target == A


async def test_single_contact_idles_after_three_attempts(dialer, scheduler):
    esc = _escalator(dialer, scheduler, [A])
    await esc.start(A)

    await scheduler.advance(30 * 10)

    assert dialer.calls == ["555-0001"] * 3
    assert esc.idle is True
    assert esc.running is True
    assert scheduler.pending == []


async def test_call_failure_keeps_retry_schedule(dialer, scheduler):
    dialer.fail = True
    esc = _escalator(dialer, scheduler, [A, B])
    await esc.start(A)
    assert len(scheduler.pending) == 1

    await scheduler.advance(60)

    assert dialer.calls == ["555-0001"] * 3
    assert len(scheduler.pending) == 1


async def test_cancel_drops_pending_recheck(dialer, scheduler):
    esc = _escalator(dialer, scheduler, [A, B])
    await esc.start(A)

    esc.cancel()
    await scheduler.advance(300)

    assert dialer.calls == ["555-0001"]
    assert esc.target is None
    assert esc.calls_made == 0
    assert scheduler.pending == []


async def test_stale_tick_after_cancel_is_ignored(dialer, scheduler):
    """A re-check already handed to the loop does nothing once cancelled."""
    esc = _escalator(dialer, scheduler, [A, B])
    await esc.start(A)
    esc.cancel()

    await esc.tick()

    assert dialer.calls == ["555-0001"]


async def test_rotation_follows_contact_changes(dialer, scheduler):
    """Escalation reads the store at rotation time."""
    contacts = [A]
    esc = CallEscalator(dialer, lambda: list(contacts), scheduler, retry_delay=30, max_attempts=3)
    await esc.start(A)
    contacts.append(B)

    await scheduler.advance(90)

    assert esc.target == B
