"""Tests for WeakList: ordered, self-expiring sequence."""

import pytest

from softrefs.containers import WeakList
from softrefs.errors import InvalidArgumentError
from softrefs.utils.comparer import Comparer


class _Thing:
    def __init__(self, name="thing"):
        self.name = name

    def __repr__(self):
        return f"_Thing({self.name!r})"


@pytest.fixture
def things():
    return [_Thing(name) for name in "abc"]


class TestExpiry:
    def test_items_expire_on_cycle_threshold(self, hub, pulse):
        lst = WeakList(cycles=3, hub=hub)
        for i in range(5):
            lst.append(_Thing(str(i)))
        pulse(2)
        assert len(lst) == 5
        pulse()
        assert len(lst) == 0
        assert lst.raw_count == 5
        pulse(3)
        assert lst.raw_count == 0

    def test_unread_items_expire_after_one_cleanup(self, hub, pulse):
        lst = WeakList(hub=hub)
        lst.append(_Thing())
        pulse()
        assert len(lst) == 0
        assert list(lst) == []

    def test_items_read_every_interval_survive(self, hub, pulse):
        lst = WeakList([_Thing(str(i)) for i in range(4)], hub=hub)
        for _ in range(10):
            assert len(lst.to_list()) == 4
            pulse()
        assert len(lst) == 4
        pulse()
        assert len(lst) == 0

    def test_externally_held_items_survive(self, hub, pulse, things):
        lst = WeakList(things, hub=hub)
        pulse(5)
        assert lst.to_list() == things

    def test_dead_items_are_invisible_before_purge(self, hub, pulse, things):
        lst = WeakList(things, hub=hub)
        lst.insert(1, _Thing("gone"))
        assert len(lst) == 4
        pulse()
        assert len(lst) == 3
        assert lst.to_list() == things


class TestLookup:
    def test_contains(self, hub, things):
        lst = WeakList(things, hub=hub)
        assert things[0] in lst
        assert _Thing("a") not in lst
        assert None not in lst

    def test_find_variants(self, hub, things):
        twin = _Thing("a")
        lst = WeakList(things + [twin], hub=hub)
        assert lst.find(lambda t: t.name == "a") is things[0]
        assert lst.find_last(lambda t: t.name == "a") is twin
        assert lst.find_all(lambda t: t.name in "ab") == [things[0], things[1], twin]
        assert lst.find(lambda t: t.name == "z") is None

    def test_index_of_uses_live_positions(self, hub, pulse, things):
        lst = WeakList(hub=hub)
        lst.append(_Thing("gone"))
        lst.extend(things)
        lst.append(things[1])
        pulse()
        assert lst.index_of(things[1]) == 1
        assert lst.last_index_of(things[1]) == 3
        assert lst.index_of(_Thing("b")) == -1
        assert lst.count_of(things[1]) == 2

    def test_custom_comparer(self, hub):
        by_name = Comparer(lambda x, y: x.name == y.name, lambda t: hash(t.name))
        lst = WeakList(comparer=by_name, hub=hub)
        first = _Thing("a")
        assert lst.add_unique(first) is True
        assert lst.add_unique(_Thing("a")) is False
        assert _Thing("a") in lst
        assert lst.comparer is by_name


class TestIndexing:
    def test_get_set_delete(self, hub, things):
        lst = WeakList(things, hub=hub)
        assert lst[0] is things[0]
        assert lst[-1] is things[2]
        assert lst[1:] == things[1:]
        replacement = _Thing("z")
        lst[1] = replacement
        assert lst.to_list() == [things[0], replacement, things[2]]
        del lst[0]
        assert lst.to_list() == [replacement, things[2]]

    def test_indices_skip_dead_items(self, hub, pulse, things):
        lst = WeakList(hub=hub)
        lst.append(_Thing("gone"))
        lst.extend(things)
        pulse()
        assert lst.raw_count == 4
        assert lst[0] is things[0]

    def test_out_of_range(self, hub, things):
        lst = WeakList(things, hub=hub)
        with pytest.raises(IndexError, match="out of range"):
            lst[3]
        with pytest.raises(IndexError):
            del lst[-4]

    def test_insert_clamps_like_list(self, hub, things):
        lst = WeakList(things[:2], hub=hub)
        lst.insert(100, things[2])
        lst.insert(-100, things[1])
        lst.insert(-1, things[0])
        assert lst.to_list() == [things[1], things[0], things[1], things[0], things[2]]


class TestMutation:
    def test_remove(self, hub, things):
        lst = WeakList(things, hub=hub)
        assert lst.remove(things[1]) is True
        assert lst.remove(things[1]) is False
        assert lst.to_list() == [things[0], things[2]]

    def test_remove_all(self, hub, things):
        lst = WeakList([things[0], things[1], things[0]], hub=hub)
        assert lst.remove_all(things[0]) == 2
        assert lst.to_list() == [things[1]]

    def test_reverse_and_clear(self, hub, things):
        lst = WeakList(things, hub=hub)
        lst.reverse()
        assert lst.to_list() == things[::-1]
        lst.clear()
        assert len(lst) == 0
        assert lst.raw_count == 0

    def test_none_items_rejected(self, hub, things):
        lst = WeakList(hub=hub)
        with pytest.raises(InvalidArgumentError):
            lst.append(None)
        with pytest.raises(InvalidArgumentError, match="item #1 is None"):
            lst.extend([things[0], None])
        assert lst.raw_count == 0

    def test_list_is_the_only_registered_listener(self, hub, pulse):
        lst = WeakList(hub=hub)
        assert hub.armed_count == 1
        held = [_Thing(str(i)) for i in range(500)]
        lst.extend(held)
        for thing in held[:100]:
            lst.append(thing)
        assert hub.armed_count == 1
        pulse()
        assert len(lst) == 600

    def test_cleanup_releases_handles_on_list_schedule(self, hub, pulse, things):
        lst = WeakList(things, cycles=2, hub=hub)
        pulse()
        assert all(slot.protected for slot in lst._slots)
        pulse()
        assert not any(slot.protected for slot in lst._slots)

    def test_repr_is_lock_free(self, hub, things):
        lst = WeakList(things, hub=hub)
        with lst._lock:
            assert repr(lst) == "<WeakList count=3 raw=3>"
