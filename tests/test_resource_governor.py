"""Tests for worker-count recommendations."""

from traitmix.utils.resource_governor import ResourceGovernor, ResourceSnapshot


def test_cap_from_configuration():
    governor = ResourceGovernor(max_workers=3)
    assert governor.recommend_workers(10) == 3
    assert governor.recommend_workers(2) == 2


def test_never_below_one():
    governor = ResourceGovernor(max_workers=4)
    assert governor.recommend_workers(0) == 1
    assert ResourceGovernor().recommend_workers(-5) == 1


def test_auto_leaves_one_cpu_free(monkeypatch):
    governor = ResourceGovernor()
    monkeypatch.setattr(governor, "snapshot", lambda: ResourceSnapshot(cpu_count=8))
    assert governor.recommend_workers(100) == 7
    assert governor.recommend_workers(3) == 3


def test_auto_without_headroom(monkeypatch):
    governor = ResourceGovernor(safe_auto_workers=False)
    monkeypatch.setattr(governor, "snapshot", lambda: ResourceSnapshot(cpu_count=8))
    assert governor.recommend_workers(100) == 8


def test_single_cpu(monkeypatch):
    governor = ResourceGovernor()
    monkeypatch.setattr(governor, "snapshot", lambda: ResourceSnapshot(cpu_count=1))
    assert governor.recommend_workers(4) == 1


def test_zero_cap_means_auto(monkeypatch):
    governor = ResourceGovernor(max_workers=0)
    monkeypatch.setattr(governor, "snapshot", lambda: ResourceSnapshot(cpu_count=4))
    assert governor.recommend_workers(10) == 3
