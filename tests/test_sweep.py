import pytest

from simsched.sweep import rate_range, run_once, sweep


def test_sweep_orders_results_by_policy_then_rate():
    results = sweep(["psjf", "rr"], [5.0, 20.0], process_limit=150, seed=1)

    assert [(r.policy, r.arrival_rate) for r in results] == [
        ("PSJF", 5.0),
        ("PSJF", 20.0),
        ("Round Robin", 5.0),
        ("Round Robin", 20.0),
    ]
    assert all(r.processes_completed == 150 for r in results)
    assert results[0].quantum is None
    assert results[2].quantum == 0.01


def test_sweep_matches_individual_runs():
    results = sweep(["rr"], [8.0], quantum=0.02, process_limit=100, seed=3)
    assert results == [run_once("rr", 8.0, quantum=0.02, process_limit=100, seed=3)]


def test_sweep_on_worker_processes_matches_sequential():
    kwargs = dict(process_limit=80, seed=6)
    sequential = sweep(["psjf", "rr"], [4.0, 12.0], **kwargs)
    parallel = sweep(["psjf", "rr"], [4.0, 12.0], workers=2, **kwargs)
    assert parallel == sequential


def test_sweep_validates_arguments():
    with pytest.raises(ValueError):
        sweep(["psjf"], [])
    with pytest.raises(ValueError):
        sweep(["lottery"], [1.0])
    with pytest.raises(ValueError):
        sweep(["rr"], [1.0], workers=0)


def test_rate_range_is_inclusive():
    assert rate_range(1, 3, 1) == [1, 2, 3]
    assert rate_range(0.5, 1.5, 0.5) == [0.5, 1.0, 1.5]
    with pytest.raises(ValueError):
        rate_range(0, 3, 1)
