from __future__ import annotations

import threading

from app.domain.entities.slot import SlotKey
from app.infrastructure.reservations.reservation_ledger import ReservationLedger

DAY = "2025-06-01"

SLOT = SlotKey(date=DAY, time="09:00", groomer="Groomer 1")


def test_create_and_validate(ledger):
    hold = ledger.create(SLOT, ttl_seconds=300)

    assert hold is not None
    assert ledger.validate(SLOT, hold.id) is True
    assert ledger.validate(SLOT, "someone-else") is False
    assert ledger.validate(SlotKey(date=DAY, time="10:00", groomer="Groomer 1"), hold.id) is False


def test_hold_expires_after_ttl(ledger, clock):
    hold = ledger.create(SLOT, ttl_seconds=300)

    clock.advance(299)
    assert ledger.validate(SLOT, hold.id) is True

    clock.advance(2)
    assert ledger.validate(SLOT, hold.id) is False
    assert len(ledger) == 0


def test_one_live_hold_per_slot(ledger, clock):
    first = ledger.create(SLOT, ttl_seconds=300)

    assert ledger.create(SLOT, ttl_seconds=300) is None
    assert ledger.validate(SLOT, first.id) is True

    clock.advance(301)
    second = ledger.create(SLOT, ttl_seconds=300)
    assert second is not None
    assert second.id != first.id
    assert ledger.validate(SLOT, first.id) is False


def test_replace_overwrites_live_hold(ledger):
    first = ledger.create(SLOT, ttl_seconds=300)
    second = ledger.create(SLOT, ttl_seconds=300, replace=True)

    assert second is not None
    assert ledger.validate(SLOT, second.id) is True
    assert ledger.get(first.id) is None


def test_slot_inputs_are_normalized(ledger):
    hold = ledger.create(SlotKey(date=DAY, time="9:00 AM", groomer=" groomer 1 "), ttl_seconds=300)

    assert hold.slot.time == "09:00"
    assert ledger.validate(SLOT, hold.id) is True
    assert ledger.create(SLOT, ttl_seconds=300) is None


def test_get_and_remove_by_id(ledger, clock):
    hold = ledger.create(SLOT, ttl_seconds=300)

    clock.advance(100)
    found = ledger.get(hold.id)
    assert found == hold
    assert found.remaining_seconds(clock()) == 200

    assert ledger.remove_by_id(hold.id) is True
    assert ledger.remove_by_id(hold.id) is False
    assert ledger.get(hold.id) is None


def test_remove_by_slot(ledger):
    ledger.create(SLOT, ttl_seconds=300)

    assert ledger.remove(SLOT) is True
    assert ledger.remove(SLOT) is False
    assert ledger.create(SLOT, ttl_seconds=300) is not None


def test_sweep_evicts_only_expired(ledger, clock):
    ledger.create(SLOT, ttl_seconds=60)
    clock.advance(30)
    later = ledger.create(SlotKey(date=DAY, time="10:00", groomer="Groomer 2"), ttl_seconds=60)

    clock.advance(31)
    assert ledger.sweep() == 1
    assert len(ledger) == 1
    assert ledger.get(later.id) is not None


def test_active_slots_for_date(ledger, clock):
    ledger.create(SLOT, ttl_seconds=60)
    ledger.create(SlotKey(date="2025-06-02", time="09:00", groomer="Groomer 1"), ttl_seconds=60)
    ledger.create(SlotKey(date=DAY, time="10:00", groomer="Groomer 2"), ttl_seconds=600)

    assert ledger.active_slots_for_date(DAY) == {
        SLOT,
        SlotKey(date=DAY, time="10:00", groomer="Groomer 2"),
    }

    clock.advance(61)
    assert ledger.active_slots_for_date(DAY) == {SlotKey(date=DAY, time="10:00", groomer="Groomer 2")}


def test_concurrent_creates_yield_a_single_hold(clock):
    ledger = ReservationLedger(clock=clock)
    barrier = threading.Barrier(16)
    results = []
    results_lock = threading.Lock()

    def worker():
        barrier.wait()
        hold = ledger.create(SLOT, ttl_seconds=300)
        with results_lock:
            results.append(hold)

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    winners = [h for h in results if h is not None]
    assert len(winners) == 1
    assert ledger.validate(SLOT, winners[0].id) is True


def test_background_sweep_start_and_shutdown(clock):
    ledger = ReservationLedger(clock=clock, sweep_interval_seconds=60)

    ledger.start()
    try:
        assert ledger.running is True
        ledger.start()
        assert ledger.running is True
    finally:
        ledger.shutdown()

    assert ledger.running is False
    ledger.shutdown()
