import random

import pytest

from marsarchive.randomness import EmptyInputError, pick_one, range_int, range_value


def test_pick_one_rejects_empty_sequence() -> None:
    with pytest.raises(EmptyInputError):
        pick_one(random.Random(1), [])


def test_pick_one_only_returns_members() -> None:
    rng = random.Random(7)
    items = ["tree", "flower", "flower-bed"]
    picks = {pick_one(rng, items) for _ in range(200)}
    assert picks == set(items)


def test_range_value_stays_in_half_open_interval() -> None:
    rng = random.Random(3)
    values = [range_value(rng, -0.2, 0.2) for _ in range(1000)]
    assert all(-0.2 <= v < 0.2 for v in values)


def test_range_int_is_floor_of_uniform_draw() -> None:
    rng = random.Random(11)
    counts = {range_int(rng, 4, 7) for _ in range(500)}
    assert counts == {4, 5, 6}


def test_range_int_never_reaches_upper_bound(monkeypatch) -> None:
    rng = random.Random()
    monkeypatch.setattr(rng, "random", lambda: 1.0 - 2 ** -53)
    assert range_int(rng, 4, 7) == 6
