"""
Catalog seed script

Loads levels, XP actions, badges, tutorials, strategies and mission templates
from app/data/catalog_data.py. Existing rows are updated in place (matched on
their natural key), so the script can be re-run.

Usage: python -m app.scripts.seed_catalog seed
"""
from sqlalchemy.orm import Session

from app.database import SessionLocal, init_db
from app.data.catalog_data import (
    BADGES,
    LEVELS,
    MISSION_TEMPLATES,
    STRATEGIES,
    TUTORIALS,
    XP_ACTIONS,
)
from app.log import get_logger, setup_logging
from app.models import (
    Badge,
    LevelThreshold,
    MissionTemplate,
    Strategy,
    Tutorial,
    XpAction,
)

logger = get_logger(__name__)


def _upsert(db: Session, model, lookup: dict, values: dict):
    row = db.query(model).filter_by(**lookup).first()
    if row is None:
        row = model(**lookup)
        db.add(row)
    for key, value in values.items():
        setattr(row, key, value)
    return row


def seed_catalog(db: Session) -> dict:
    """Write the whole catalog; returns the number of rows per table"""
    for level in LEVELS:
        _upsert(db, LevelThreshold, {"level": level["level"]}, level)

    for action in XP_ACTIONS:
        _upsert(db, XpAction, {"action_type": action["action_type"]}, {**action, "is_active": True})

    for badge in BADGES:
        _upsert(db, Badge, {"slug": badge["slug"]}, {**badge, "is_active": True})

    tutorials = {}
    for tutorial in TUTORIALS:
        tutorials[tutorial["key"]] = _upsert(
            db, Tutorial, {"title": tutorial["title"]}, {"is_active": True}
        )

    strategies = {}
    for strategy in STRATEGIES:
        strategies[strategy["slug"]] = _upsert(db, Strategy, {"slug": strategy["slug"]}, strategy)
    db.flush()

    template_count = 0
    for slug, templates in MISSION_TEMPLATES.items():
        strategy = strategies[slug]
        for order, template in enumerate(templates, start=1):
            tutorial = tutorials.get(template.get("tutorial"))
            required = tutorials.get(template.get("required_tutorial"))
            _upsert(
                db,
                MissionTemplate,
                {"strategy_id": strategy.id, "title": template["title"]},
                {
                    "type": template["type"],
                    "content_idea": template["content_idea"],
                    "order": order,
                    "is_active": True,
                    "tutorial_id": tutorial.id if tutorial else None,
                    "required_tutorial_id": required.id if required else None,
                    "notification_time": template.get("notification_time"),
                },
            )
            template_count += 1

    db.commit()
    counts = {
        "levels": len(LEVELS),
        "xp_actions": len(XP_ACTIONS),
        "badges": len(BADGES),
        "tutorials": len(TUTORIALS),
        "strategies": len(STRATEGIES),
        "mission_templates": template_count,
    }
    logger.info("event=catalog.seeded | counts=%s", counts)
    return counts


def list_catalog(db: Session) -> None:
    for strategy in db.query(Strategy).order_by(Strategy.id).all():
        print(f"\n=== {strategy.name} ({strategy.slug}) ===")
        templates = (
            db.query(MissionTemplate)
            .filter(MissionTemplate.strategy_id == strategy.id)
            .order_by(MissionTemplate.order)
            .all()
        )
        for template in templates:
            status = "actif" if template.is_active else "inactif"
            print(f"  [{template.type}] {template.title} ({status})")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Catalog seed data")
    parser.add_argument("action", choices=["seed", "list"], help="Action to run")
    args = parser.parse_args()

    setup_logging()
    init_db()
    session = SessionLocal()
    try:
        if args.action == "seed":
            print(seed_catalog(session))
        else:
            list_catalog(session)
    finally:
        session.close()
