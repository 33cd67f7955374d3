from datetime import date, datetime, timezone

from app.models import Badge, BadgeUnlock, InAppNotification, Mission, MissionStatus, Streak, TutorialCompletion
from app.services.gamification_service import GamificationService
from app.services.level_service import LevelService
from app.services.notification_service import InAppNotificationService
from app.services.statistics_service import StatisticsService

MONDAY = date(2025, 3, 3)


# ===== Streaks =====

def test_first_activity_starts_streak(db, user):
    streak = GamificationService(db).update_streak(user.id, MONDAY)
    assert (streak.current_streak, streak.longest_streak) == (1, 1)
    assert streak.last_activity_date == MONDAY


def test_streak_counts_consecutive_days(db, user):
    service = GamificationService(db)
    service.update_streak(user.id, MONDAY)
    service.update_streak(user.id, MONDAY)
    streak = service.update_streak(user.id, date(2025, 3, 4))
    assert (streak.current_streak, streak.longest_streak) == (2, 2)


def test_streak_restarts_after_gap_and_keeps_record(db, user):
    db.add(Streak(user_id=user.id, current_streak=5, longest_streak=9, last_activity_date=date(2025, 2, 27)))
    db.commit()
    streak = GamificationService(db).update_streak(user.id, MONDAY)
    assert (streak.current_streak, streak.longest_streak) == (1, 9)


def test_check_streak_reset(db, user):
    db.add(Streak(user_id=user.id, current_streak=4, longest_streak=4, last_activity_date=date(2025, 2, 28)))
    db.commit()
    service = GamificationService(db)

    assert not service.check_streak_reset(user.id, date(2025, 3, 1))
    assert service.check_streak_reset(user.id, MONDAY)
    assert service.get_streak_info(user.id, MONDAY).current_streak == 0
    assert service.get_users_with_active_streak() == []


def test_streak_info_at_risk(db, user):
    db.add(Streak(user_id=user.id, current_streak=3, longest_streak=3, last_activity_date=date(2025, 3, 2)))
    db.commit()
    info = GamificationService(db).get_streak_info(user.id, MONDAY)
    assert info.is_at_risk
    assert info.encouragement == "Fais ta mission pour garder ton streak ! 🔥"


def test_streak_encouragement_tiers():
    encourage = GamificationService.get_streak_encouragement
    assert encourage(0, False) == "Commence ta série dès maintenant !"
    assert encourage(1, False) == "Premier jour, c'est parti ! 💪"
    assert "tu es en feu" in encourage(5, False)
    assert "légende" in encourage(45, False)


# ===== Badges =====

def _complete_missions(db, user, template, count):
    for _ in range(count):
        db.add(Mission(
            user_id=user.id,
            mission_template_id=template.id,
            slot_number=1,
            status=MissionStatus.COMPLETED.value,
            assigned_at=datetime(2025, 2, 1, tzinfo=timezone.utc),
        ))
    db.commit()


def test_badges_unlock_once(db, rewards, catalog, user):
    service = GamificationService(db)
    _complete_missions(db, user, catalog[0], 5)

    unlocked = service.check_badge_unlocks(user.id)
    assert [badge.slug for badge in unlocked] == ["commis"]
    assert service.check_badge_unlocks(user.id) == []
    assert db.query(BadgeUnlock).filter(BadgeUnlock.user_id == user.id).count() == 1


def test_tutorial_badge(db, rewards, tutorials, user):
    for tutorial in tutorials.values():
        db.add(TutorialCompletion(user_id=user.id, tutorial_id=tutorial.id, completed_at=datetime.now(timezone.utc)))
    db.commit()
    service = GamificationService(db)
    assert service.get_user_stats(user.id)["tutorials_viewed"] == 2
    assert service.check_badge_unlocks(user.id) == []


def test_inactive_badges_are_ignored(db, rewards, catalog, user):
    db.query(Badge).filter(Badge.slug == "commis").update({Badge.is_active: False})
    db.commit()
    _complete_missions(db, user, catalog[0], 5)
    assert GamificationService(db).check_badge_unlocks(user.id) == []


def test_user_badges_status(db, rewards, catalog, user):
    service = GamificationService(db)
    _complete_missions(db, user, catalog[0], 5)
    service.check_badge_unlocks(user.id)

    badges = service.get_user_badges(user.id)
    assert len(badges) == 10
    status = {item["badge"].slug: item["unlocked"] for item in badges}
    assert status["commis"]
    assert not status["sous-chef"]


# ===== Levels =====

def test_add_xp_unknown_action(db, rewards, user):
    result = LevelService(db).add_xp(user.id, "unknown_action")
    assert result.xp_added == 0
    assert not result.level_up.leveled_up


def test_add_xp_levels_up(db, rewards, user):
    service = LevelService(db)
    user.xp_total = 45
    db.commit()

    result = service.add_xp(user.id, "mission_completed")
    assert result.xp_added == 10
    assert result.level_up.leveled_up
    assert result.level_up.new_level == 2
    assert result.level_up.new_level_name == "Apprenti"

    notification = db.query(InAppNotification).filter(InAppNotification.user_id == user.id).one()
    assert notification.type == "level_up"
    assert notification.data["level"] == 2


def test_level_info_progress(db, rewards, user):
    user.xp_total = 100
    user.current_level = 2
    db.commit()

    info = LevelService(db).get_level_info(user.id)
    assert info.level_name == "Apprenti"
    assert info.xp_progress_in_level == 50
    assert info.xp_for_next_level == 50
    assert info.progress_percent == 50
    assert not info.is_max_level


def test_level_info_max_level(db, rewards, user):
    user.xp_total = 5000
    user.current_level = 10
    db.commit()
    info = LevelService(db).get_level_info(user.id)
    assert info.is_max_level
    assert info.progress_percent == 100


# ===== Notifications / statistics =====

def test_notification_center(db, user):
    service = InAppNotificationService(db)
    first = service.create(user.id, "Un", "corps")
    service.create(user.id, "Deux", "corps")

    assert service.count_unread(user.id) == 2
    assert service.mark_as_read(first.id, user.id)
    assert not service.mark_as_read(first.id, user.id + 1)
    assert [n.title for n in service.get_for_user(user.id, unread_only=True)] == ["Deux"]
    assert service.mark_all_as_read(user.id) == 1
    assert service.count_unread(user.id) == 0


def test_daily_stats_upsert(db, catalog, user):
    service = StatisticsService(db)
    _complete_missions(db, user, catalog[0], 2)

    metrics = service.calculate_daily_stats(user.id, MONDAY)
    assert metrics["missions_completed"] == 2
    assert metrics["posts_count"] == 2

    _complete_missions(db, user, catalog[2], 1)
    metrics = service.calculate_daily_stats(user.id, MONDAY)
    assert metrics["stories_count"] == 1
    evolution = service.get_evolution(user.id, "missions_completed")
    assert evolution == [{"date": "2025-03-03", "value": 3}]
