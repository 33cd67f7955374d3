import pytest
from sqlalchemy.exc import IntegrityError

from app.database import MISSION_SLOT_INDEX, index_exists, init_db, run_migrations
from app.models import Mission, MissionStatus
from tests.conftest import MONDAY, TUESDAY


def _mission(user, template, slot, assigned_at):
    return Mission(
        user_id=user.id,
        mission_template_id=template.id,
        slot_number=slot,
        status=MissionStatus.PENDING.value,
        assigned_at=assigned_at,
    )


def test_migration_removes_duplicates_and_adds_unique_index(engine, db, catalog, user):
    keep = _mission(user, catalog[0], 1, MONDAY)
    db.add(keep)
    db.commit()
    db.add_all([
        _mission(user, catalog[1], 1, MONDAY.replace(hour=18)),
        _mission(user, catalog[4], 2, MONDAY),
        _mission(user, catalog[0], 1, TUESDAY),
    ])
    db.commit()

    run_migrations(engine)

    rows = db.query(Mission).order_by(Mission.id).all()
    assert len(rows) == 3
    assert rows[0].id == keep.id
    assert index_exists(engine, MISSION_SLOT_INDEX)

    db.add(_mission(user, catalog[2], 2, MONDAY.replace(hour=20)))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_init_db_is_repeatable(engine):
    init_db(engine)
    init_db(engine)
    assert index_exists(engine, MISSION_SLOT_INDEX)
