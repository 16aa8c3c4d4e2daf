"""End-to-end behaviour with the shared hub driven by real collections."""

import gc
import threading
import weakref

from softrefs import PulseHub, WeakList, WeakValueMap


class _Thing:
    def __init__(self, name="thing"):
        self.name = name


def test_collection_drives_cleanup():
    lst = WeakList(trace=False)
    lst.append(_Thing())
    gc.collect()
    assert len(lst) == 0
    gc.collect()
    assert lst.raw_count == 0


def test_cyclic_garbage_is_collected_after_release():
    cache = WeakValueMap(trace=False)
    thing = _Thing()
    thing.self_ref = thing
    cache["cyclic"] = thing
    del thing
    gc.collect()
    gc.collect()
    assert "cyclic" not in cache


def test_container_is_not_kept_alive_by_hub():
    hub = PulseHub.instance()
    before = hub.armed_count
    lst = WeakList(trace=False)
    ref = weakref.ref(lst)
    assert hub.armed_count == before + 1
    del lst
    assert ref() is None
    assert hub.armed_count == before


def test_concurrent_writers_and_pulses(hub):
    lst = WeakList(hub=hub, trace=False)
    held = [[_Thing(f"{w}/{i}") for i in range(200)] for w in range(4)]
    stop = threading.Event()

    def pulser():
        while not stop.is_set():
            hub.pulse()

    def writer(items):
        for item in items:
            lst.append(item)

    pulse_thread = threading.Thread(target=pulser)
    pulse_thread.start()
    writers = [threading.Thread(target=writer, args=(items,)) for items in held]
    for thread in writers:
        thread.start()
    for thread in writers:
        thread.join()
    stop.set()
    pulse_thread.join()

    assert len(lst) == 800
    assert lst.raw_count == 800
    assert lst.stats.pulses == hub.pulse_count
