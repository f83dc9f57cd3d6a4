from pathlib import Path

import pytest

from simsched.models import Process
from simsched.workload import poisson_processes
from simsched.workload_io import load_workload


def test_load_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"pid":"B","arrival_time":1.5,"burst_time":2},'
                 '{"pid":"A","arrival_time":0,"burst_time":0.25}]')
    procs = load_workload(p)
    assert isinstance(procs[0], Process)
    assert [x.pid for x in procs] == ["A", "B"]
    assert procs[0].remaining_cpu_time == 0.25
    assert procs[1].arrival_time == 1.5


def test_load_csv(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time,burst_time\nA,0,3\nB,1,2\n")
    procs = load_workload(p)
    assert procs[0].pid == "A"
    assert procs[1].burst_time == 2.0


def test_rejects_bad_entries(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time,burst_time\nA,0,zero\n")
    with pytest.raises(ValueError):
        load_workload(p)

    p.write_text("pid,arrival_time,burst_time\nA,0,0\n")
    with pytest.raises(ValueError):
        load_workload(p)


def test_rejects_unknown_format(tmp_path: Path):
    p = tmp_path / "w.yaml"
    p.write_text("[]")
    with pytest.raises(ValueError):
        load_workload(p)


def test_poisson_processes_are_ordered_and_reproducible():
    first = list(poisson_processes(10.0, 0.06, seed=7, count=200))
    second = list(poisson_processes(10.0, 0.06, seed=7, count=200))

    assert len(first) == 200
    assert [(p.arrival_time, p.burst_time) for p in first] == [
        (p.arrival_time, p.burst_time) for p in second
    ]
    arrivals = [p.arrival_time for p in first]
    assert arrivals == sorted(arrivals)
    assert all(p.burst_time > 0 for p in first)
    assert len({p.pid for p in first}) == 200


def test_poisson_processes_rejects_bad_parameters():
    with pytest.raises(ValueError):
        next(poisson_processes(0.0))
    with pytest.raises(ValueError):
        next(poisson_processes(1.0, mean_service_time=-1.0))
