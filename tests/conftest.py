import random
from dataclasses import replace

import pytest

from seat_chart import config
from seat_chart.models import ClassData, Seat, Workspace
from seat_chart.student_import import set_roster


@pytest.fixture
def roster():
    return ["01 王小明", "02 林大衛", "03"]


@pytest.fixture
def small_class(roster):
    """2x2 grid with three students, nobody seated."""
    return set_roster(ClassData(name="三年甲班", teacher_name="陳老師", rows=2, cols=2), roster)


@pytest.fixture
def seated_class(small_class):
    seating = {Seat(1, 1): "01 王小明", Seat(1, 2): "02 林大衛"}
    return replace(small_class, seating=seating)


@pytest.fixture
def workspace(seated_class):
    return Workspace(data=seated_class)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def export_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "EXPORT_DIR", tmp_path / "exports")
    return tmp_path / "exports"
