"""Tests for WeakHandle, WeakSlot and StrongSlot."""

import weakref

import pytest

from softrefs.containers import StrongSlot, WeakHandle, WeakSlot
from softrefs.errors import InvalidArgumentError


class _Thing:
    def __init__(self, name="thing"):
        self.name = name


def test_slot_protects_target_until_first_cleanup(hub, pulse):
    slot = WeakSlot(_Thing(), hub=hub)
    assert slot.is_alive()
    assert slot.protected
    pulse()
    assert not slot.is_alive()
    assert slot.read() is None


def test_read_protects_through_next_cleanup(hub, pulse):
    slot = WeakSlot(_Thing(), hub=hub)
    for _ in range(5):
        assert slot.read() is not None
        pulse()
    assert slot.is_alive()
    pulse()
    assert not slot.is_alive()


def test_peek_does_not_protect(hub, pulse):
    slot = WeakSlot(_Thing(), hub=hub)
    pulse()
    # Released above: only a caller reference keeps it now.
    assert slot.peek_weak() is None


def test_externally_held_target_survives(hub, pulse):
    thing = _Thing()
    slot = WeakSlot(thing, hub=hub)
    pulse(3)
    assert slot.is_alive()
    assert not slot.protected
    assert slot.peek_weak() is thing


def test_slot_respects_cycle_threshold(hub, pulse):
    slot = WeakSlot(_Thing(), cycles=3, hub=hub)
    pulse(2)
    assert slot.is_alive()
    pulse()
    assert not slot.is_alive()


def test_slot_does_not_outlive_itself(hub):
    thing = _Thing()
    ref = weakref.ref(thing)
    slot = WeakSlot(thing, hub=hub)
    del thing, slot
    assert ref() is None
    assert hub.armed_count == 0


def test_none_target_rejected(hub):
    with pytest.raises(InvalidArgumentError):
        WeakSlot(None, hub=hub)


def test_unreferenceable_target_rejected(hub):
    with pytest.raises(TypeError):
        WeakSlot(42, hub=hub)


def test_repr_reports_state(hub, pulse):
    thing = _Thing()
    slot = WeakSlot(thing, hub=hub)
    assert repr(slot).startswith("<WeakSlot strong")
    pulse()
    assert repr(slot).startswith("<WeakSlot weak")
    del thing
    assert repr(slot) == "<WeakSlot dead None>"


def test_strong_slot_is_always_alive():
    slot = StrongSlot("value")
    assert slot.is_alive()
    assert slot.read() == "value"
    assert slot.peek_weak() == "value"


def test_handle_release_grace():
    thing = _Thing()
    handle = WeakHandle(thing)
    assert handle.protected
    handle.release()
    assert not handle.protected
    assert handle.read() is thing
    handle.release()
    assert handle.protected
    handle.release()
    assert not handle.protected
    assert handle.peek_weak() is thing


def test_handle_repr():
    handle = WeakHandle(_Thing())
    assert repr(handle).startswith("<WeakHandle strong")
