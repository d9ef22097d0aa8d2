"""Tests for the event log and history ring."""

import random
import re

import pytest

from neuroflex.monitoring import EventLog, LogEntry, LogType
from neuroflex.telemetry import HistoryBuffer, SystemMetrics


def _metrics(cpu, mem=50.0):
    return SystemMetrics(cpu_load=cpu, memory_usage=mem, network_latency=50.0, temperature=45.0)


def test_fifty_first_append_evicts_the_oldest():
    log = EventLog()
    for index in range(51):
        log.append(LogType.INFO, f"event {index}")

    entries = log.entries()
    assert len(entries) == 50
    assert entries[0].message == "event 1"
    assert entries[-1].message == "event 50"


def test_append_returns_entry_with_padded_timestamp(wall_clock):
    log = EventLog(clock=wall_clock)
    entry = log.append("SYSTEM", "scaled")

    assert isinstance(entry, LogEntry)
    assert entry.type is LogType.SYSTEM
    assert entry.timestamp == "09:05:03"
    assert re.fullmatch(r"\d{2}:\d{2}:\d{2}", entry.timestamp)


def test_fifo_order_preserved_for_any_capacity():
    driver = random.Random(3)
    for capacity in (1, 2, 7, 50):
        log = EventLog(capacity=capacity)
        appended = []
        for index in range(driver.randint(0, 120)):
            kind = driver.choice(list(LogType))
            log.append(kind, f"m{index}")
            appended.append(f"m{index}")
            assert len(log) <= capacity
        assert [e.message for e in log] == appended[-capacity:]


def test_ids_unique_within_live_buffer():
    log = EventLog(capacity=50)
    for index in range(200):
        log.append(LogType.AI, str(index))
    ids = [entry.id for entry in log]
    assert len(set(ids)) == len(ids)


def test_no_deduplication():
    log = EventLog()
    log.append(LogType.INFO, "same")
    log.append(LogType.INFO, "same")
    assert len(log) == 2


def test_recent_messages_returns_newest_tail_in_order():
    log = EventLog()
    assert log.recent_messages() == []
    for message in ["a", "b", "c", "d"]:
        log.append(LogType.INFO, message)
    assert log.recent_messages(3) == ["b", "c", "d"]
    assert log.recent_messages(0) == []


def test_entries_snapshot_is_immutable():
    log = EventLog()
    log.append(LogType.INFO, "one")
    snapshot = log.entries()
    log.append(LogType.INFO, "two")
    assert len(snapshot) == 1
    with pytest.raises(AttributeError):
        snapshot[0].message = "changed"


def test_invalid_log_type_rejected():
    with pytest.raises(ValueError):
        EventLog().append("DEBUG", "nope")


def test_history_keeps_last_samples_oldest_first():
    ticks = iter(range(100))
    history = HistoryBuffer(capacity=30, clock=lambda: next(ticks))
    for cpu in range(35):
        history.add(_metrics(cpu))

    samples = history.samples()
    assert len(samples) == 30
    assert samples[0].cpu == 5
    assert samples[-1].cpu == 34
    assert [s.time for s in samples] == sorted(s.time for s in samples)


def test_history_capacity_must_be_positive():
    with pytest.raises(ValueError):
        HistoryBuffer(capacity=0)
