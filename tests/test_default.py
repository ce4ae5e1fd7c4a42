from __future__ import annotations

import sys
import threading
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from regiontimer import default


def setup_function():
    default.reset()


def test_module_level_time():
    assert default.time("hello", lambda: default.time("world", lambda: 42)) == 42
    timers = default.get_timer_set()
    assert timers[("hello", "world")].count == 1
    with default.track("hello"):
        pass
    assert timers[("hello",)].count == 2


def test_clone_is_independent():
    default.time("a", lambda: None)
    copy = default.clone()
    default.time("a", lambda: None)
    assert copy[("a",)].count == 1
    assert default.get_timer_set()[("a",)].count == 2


def test_default_timer_set_is_per_thread():
    default.time("main", lambda: None)
    other = {}

    def work():
        default.time("worker", lambda: None)
        other["timers"] = default.get_timer_set()

    thread = threading.Thread(target=work)
    thread.start()
    thread.join(timeout=5)
    assert other["timers"] is not default.get_timer_set()
    assert ("worker",) not in default.get_timer_set()
    assert ("main",) not in other["timers"]


def test_reset_drops_table():
    default.time("a", lambda: None)
    default.reset()
    assert len(default.get_timer_set()) == 0


def test_module_level_time_passes_body_keywords():
    def body(name):
        return name.upper()

    assert default.time("x", body, name="y") == "Y"
    assert default.get_timer_set()[("x",)].count == 1
