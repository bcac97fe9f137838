from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import DateTime
from sqlmodel import SQLModel

from findbids.db import models
from findbids.schemas import RfpCreate, RfpUpdate
from findbids.utils import ensure_utc, utcnow

TABLE_MODELS = [getattr(models, name) for name in models.__all__]


def _datetime_columns():
    for table in SQLModel.metadata.sorted_tables:
        for column in table.columns:
            if isinstance(column.type, DateTime):
                yield table.name, column


def test_utcnow_is_timezone_aware():
    now = utcnow()
    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)


def test_ensure_utc():
    assert ensure_utc(None) is None
    assert ensure_utc(datetime(2030, 1, 1, 9)) == datetime(2030, 1, 1, 9, tzinfo=timezone.utc)
    shifted = datetime(2030, 1, 1, 9, tzinfo=timezone(timedelta(hours=2)))
    assert ensure_utc(shifted) == datetime(2030, 1, 1, 7, tzinfo=timezone.utc)
    assert ensure_utc(shifted).tzinfo == timezone.utc


@pytest.mark.parametrize("model", TABLE_MODELS, ids=lambda m: m.__name__)
def test_generated_timestamps_carry_utc_offset(model):
    for name, info in model.model_fields.items():
        if info.default_factory is None:
            continue
        value = info.default_factory()
        if isinstance(value, datetime):
            assert value.tzinfo is not None, f"{model.__name__}.{name}"


def test_datetime_columns_are_timezone_aware():
    columns = list(_datetime_columns())
    assert columns
    for table_name, column in columns:
        assert column.type.timezone, f"{table_name}.{column.name}"


def test_rfp_dates_are_normalised_to_utc():
    data = RfpCreate(
        title="Roof",
        description="Replace roof",
        walkthrough_date="2030-01-10T09:00:00",
        rfi_date="2030-01-15T17:00:00+02:00",
        deadline="2030-02-01T17:00:00Z",
        job_location="Springfield",
    )
    assert data.walkthrough_date == datetime(2030, 1, 10, 9, tzinfo=timezone.utc)
    assert data.rfi_date == datetime(2030, 1, 15, 15, tzinfo=timezone.utc)
    assert data.deadline.tzinfo == timezone.utc

    update = RfpUpdate(deadline="2030-03-01T08:00:00")
    assert update.deadline == datetime(2030, 3, 1, 8, tzinfo=timezone.utc)
    assert RfpUpdate(title="x").deadline is None
