import random
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app import models  # noqa: F401
from app.config import Settings
from app.data.catalog_data import BADGES, LEVELS, XP_ACTIONS
from app.database import Base
from app.models import (
    Badge,
    LevelThreshold,
    MissionTemplate,
    Restaurant,
    Strategy,
    Tutorial,
    User,
    XpAction,
)
from app.services.mission_service import MissionService

# Monday; a publication day for every rhythm
MONDAY = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)
TUESDAY = datetime(2025, 3, 4, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def settings():
    return Settings(mission_lock_timeout_ms=2000, anthropic_api_key="")


@pytest.fixture
def rewards(db):
    """Level thresholds, XP actions and badges"""
    for level in LEVELS:
        db.add(LevelThreshold(**level))
    for action in XP_ACTIONS:
        db.add(XpAction(**action, is_active=True))
    for badge in BADGES:
        db.add(Badge(**badge, is_active=True))
    db.commit()


@pytest.fixture
def tutorials(db):
    """Two tutorials: `intro` backs the tuto mission, `advanced` gates a post"""
    intro = Tutorial(title="Photo de plat", is_active=True)
    advanced = Tutorial(title="Réel de 30 secondes", is_active=True)
    db.add_all([intro, advanced])
    db.commit()
    return {"intro": intro, "advanced": advanced}


def add_templates(db, strategy, rows):
    templates = []
    for order, fields in enumerate(rows, start=1):
        fields = dict(fields)
        templates.append(MissionTemplate(
            strategy_id=strategy.id,
            type=fields.pop("type"),
            title=fields.pop("title", f"Template {order}"),
            content_idea=fields.pop("content_idea", "Idée"),
            order=order,
            is_active=fields.pop("is_active", True),
            **fields,
        ))
    db.add_all(templates)
    db.commit()
    return templates


def add_user(db, email, strategy=None, rhythm="three_week", notification_time=None):
    user = User(email=email, name=email.split("@")[0], notification_time=notification_time)
    db.add(user)
    db.flush()
    db.add(Restaurant(
        user_id=user.id,
        name=f"Chez {user.name}",
        city="Lyon",
        strategy_id=strategy.id if strategy else None,
        publication_rhythm=rhythm,
    ))
    db.commit()
    return user


@pytest.fixture
def strategy(db):
    strategy = Strategy(name="Faire connaître", slug="notoriete")
    db.add(strategy)
    db.commit()
    return strategy


@pytest.fixture
def catalog(db, strategy, tutorials):
    """Every mission type, one tuto and one post gated by the advanced tutorial"""
    return add_templates(db, strategy, [
        {"type": "post", "title": "Plat du jour"},
        {"type": "post", "title": "Avis client"},
        {"type": "story", "title": "Coulisses"},
        {"type": "reel", "title": "Recette en vidéo"},
        {"type": "engagement", "title": "Commenter chez les voisins"},
        {"type": "engagement", "title": "Répondre aux avis"},
        {"type": "tuto", "title": "Tuto photo", "tutorial_id": tutorials["intro"].id},
        {"type": "post", "title": "Réel avancé", "required_tutorial_id": tutorials["advanced"].id},
    ])


@pytest.fixture
def user(db, strategy):
    return add_user(db, "marie@example.com", strategy=strategy)


@pytest.fixture
def make_service(db, settings, session_factory):
    def _make(clock_at=MONDAY, seed=0, session=None):
        return MissionService(
            session or db,
            rng=random.Random(seed),
            clock=lambda: clock_at,
            settings=settings,
            session_factory=session_factory,
        )
    return _make
