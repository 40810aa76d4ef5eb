import pytest

from celestemods.auto_saver import AutoSaver


def test_saver_runs_after_borrow_with_mutated_value():
    saved = []
    holder = AutoSaver([1], lambda v: saved.append(list(v)))
    with holder.borrow_mut() as ref:
        ref.value.append(2)
        assert saved == []
    assert saved == [[1, 2]]
    assert holder.value == [1, 2]


def test_replacing_value_is_kept_and_saved():
    saved = []
    holder = AutoSaver("old", saved.append)
    with holder.borrow_mut() as ref:
        ref.value = "new"
    assert holder.value == "new"
    assert saved == ["new"]


def test_reading_does_not_save():
    saved = []
    holder = AutoSaver({"a": 1}, saved.append)
    assert holder.value["a"] == 1
    assert saved == []


def test_saver_runs_when_block_raises():
    saved = []
    holder = AutoSaver([], lambda v: saved.append(len(v)))
    with pytest.raises(RuntimeError):
        with holder.borrow_mut() as ref:
            ref.value.append("x")
            raise RuntimeError("boom")
    assert saved == [1]


def test_each_borrow_saves_once():
    calls = []
    holder = AutoSaver(0, calls.append)
    for _ in range(3):
        with holder.borrow_mut() as ref:
            ref.value += 1
    assert calls == [1, 2, 3]