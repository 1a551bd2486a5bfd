"""Shared fixtures."""

import pytest

from app.models import Column, Record
from app.repositories import close_db


@pytest.fixture
def record():
    return Record(id=1, name="Rune", high=100, low=50, volume=20000, limit=70, highTime=1000, lowTime=900)


@pytest.fixture
def make_column():
    def make(id, expression, **kwargs):
        return Column(id=id, name=kwargs.pop("name", id), expression=expression, **kwargs)

    return make


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "test.duckdb")
    yield path
    close_db(path)
