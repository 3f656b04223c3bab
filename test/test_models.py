import uuid
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from smarttrip.models.models import Trip


def valid_row(**changes):
    fields = dict(
        user_id=uuid.uuid4(),
        destination="Paris",
        start_date=date(2026, 6, 1),
        end_date=date(2026, 6, 3),
        budget_tier="high",
        travel_style="adventure",
        group_size=2,
    )
    fields.update(changes)
    return Trip(**fields)


def test_valid_row_is_stored(session_factory):
    with session_factory() as db:
        db.add(valid_row())
        db.commit()
        assert db.query(Trip).count() == 1


@pytest.mark.parametrize("changes", [
    {"budget_tier": "ultra"},
    {"travel_style": "shopping"},
    {"group_size": 0},
    {"group_size": 51},
    {"end_date": None},
])
def test_table_rejects_invalid_rows(session_factory, changes):
    with session_factory() as db:
        db.add(valid_row(**changes))
        with pytest.raises(IntegrityError):
            db.commit()
