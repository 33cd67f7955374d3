import random
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Iterable, NamedTuple, Optional

from sqlalchemy import or_, update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from app.config import Settings, get_settings
from app.log import get_logger
from app.models.mission import Mission, MissionStatus
from app.models.mission_template import MissionTemplate, MissionType, PUBLICATION_TYPES
from app.models.notification import NotificationType
from app.models.restaurant import Restaurant
from app.models.tutorial import TutorialCompletion
from app.models.gamification import XpActionType
from app.schemas.mission import AssignmentResult, MissionErrorCode, MissionResponse, MissionResult
from app.services.gamification_service import GamificationService
from app.services.level_service import LevelService
from app.services.mission_lock import MissionLockTimeout, user_transaction_lock
from app.services.notification_service import InAppNotificationService
from app.services.rhythm import is_publication_day, planned_days
from app.services.statistics_service import StatisticsService

logger = get_logger(__name__)

STREAK_MILESTONE_DAYS = 7


class SlotRule(NamedTuple):
    slot_number: int
    # Candidate types grouped by preference; an earlier group wins when it yields a template
    type_tiers: tuple[tuple[str, ...], ...]
    # "publication": recommended on publication days, "rest": on the other days, None: never
    recommended_on: Optional[str]

    def is_recommended(self, publication_day: bool) -> bool:
        if self.recommended_on == "publication":
            return publication_day
        if self.recommended_on == "rest":
            return not publication_day
        return False


SLOT_RULES = (
    SlotRule(1, (PUBLICATION_TYPES,), "publication"),
    SlotRule(2, ((MissionType.ENGAGEMENT.value,),), "rest"),
    SlotRule(3, ((MissionType.TUTO.value,), PUBLICATION_TYPES), None),
)

# Duplicate rows are deleted off the request path
_cleanup_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mission-cleanup")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """[start, end) of the UTC calendar day containing `now`"""
    now = now.astimezone(timezone.utc) if now.tzinfo else now.replace(tzinfo=timezone.utc)
    start = datetime(now.year, now.month, now.day, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def _delete_duplicate_missions(session_factory: Callable[[], Session], mission_ids: list[int]) -> int:
    db = session_factory()
    try:
        deleted = db.execute(delete(Mission).where(Mission.id.in_(mission_ids))).rowcount
        db.commit()
        logger.info("event=mission.duplicates_deleted | ids=%s | count=%s", mission_ids, deleted)
        return deleted
    except Exception:
        db.rollback()
        logger.exception("event=mission.duplicate_cleanup_failed | ids=%s", mission_ids)
        return 0
    finally:
        db.close()


class MissionService:
    """
    Daily missions: idempotent assignment, completion, skip and reload.

    Three missions per user per UTC day, one per slot:
      slot 1  publication (post/story/reel), recommended on publication days
      slot 2  engagement, recommended on the other days
      slot 3  tuto, or a publication type not used by slot 1
    """

    def __init__(
        self,
        db: Session,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        settings: Optional[Settings] = None,
        session_factory: Optional[Callable[[], Session]] = None,
    ):
        self.db = db
        self.rng = rng or random.Random()
        self.clock = clock or utc_now
        self.settings = settings or get_settings()
        self.session_factory = session_factory or sessionmaker(bind=db.get_bind(), autoflush=False)
        self.gamification_service = GamificationService(db)
        self.level_service = LevelService(db)
        self.notification_service = InAppNotificationService(db)
        self.statistics_service = StatisticsService(db)
        # Last scheduled duplicate cleanup, if any
        self.pending_cleanup: Optional[Future] = None

    # ===== Today's missions =====

    def get_today_missions(self, user_id: int) -> list[Mission]:
        """Today's missions ordered by slot; empty when none could be assigned"""
        result = self.assign_today_missions(user_id)
        if result.retryable:
            logger.warning("event=mission.today_unavailable | user_id=%s | error=%s", user_id, result.error_code.value)
        return result.missions

    def get_today_mission(self, user_id: int) -> Optional[Mission]:
        """The recommended mission of the day, or the first one"""
        missions = self.get_today_missions(user_id)
        return next((m for m in missions if m.is_recommended), missions[0] if missions else None)

    def assign_today_missions(self, user_id: int) -> AssignmentResult:
        """
        Return today's missions, creating them on the first call of the day.

        The unlocked read serves every call but the first. Creation runs
        under the user's exclusive lock and re-reads first, so concurrent
        first calls (double page load, retried request) create a single set.
        """
        now = self.clock()
        start, end = utc_day_bounds(now)

        missions = self._fetch_missions_between(user_id, start, end)
        if missions:
            return AssignmentResult(missions=self._deduplicate(missions))

        try:
            with user_transaction_lock(self.db, user_id, self.settings.mission_lock_timeout_ms):
                missions = self._fetch_missions_between(user_id, start, end)
                if missions:
                    self.db.commit()
                    return AssignmentResult(missions=self._deduplicate(missions))

                missions = self._prescribe_daily_missions(user_id, now)
                self.db.commit()
        except MissionLockTimeout:
            return AssignmentResult(error_code=MissionErrorCode.LOCK_TIMEOUT)
        except IntegrityError:
            # The unique daily-slot index caught a writer that bypassed the lock
            self.db.rollback()
            logger.warning("event=mission.assign_conflict | user_id=%s", user_id)
            missions = self._fetch_missions_between(user_id, start, end)
            return AssignmentResult(missions=self._deduplicate(missions))

        if missions:
            logger.info(
                "event=mission.assigned | user_id=%s | slots=%s",
                user_id, [(m.slot_number, m.mission_template_id) for m in missions],
            )
            return AssignmentResult(missions=missions)

        if not self._get_strategy_id(user_id):
            return AssignmentResult(error_code=MissionErrorCode.NO_STRATEGY)
        return AssignmentResult()

    def _fetch_missions_between(self, user_id: int, start: datetime, end: datetime) -> list[Mission]:
        return (
            self.db.query(Mission)
            .filter(
                Mission.user_id == user_id,
                Mission.assigned_at >= start,
                Mission.assigned_at < end,
            )
            .order_by(Mission.slot_number.asc(), Mission.id.asc())
            .all()
        )

    def _deduplicate(self, missions: list[Mission]) -> list[Mission]:
        """Keep the oldest mission of each slot; delete the others in the background"""
        kept: dict[int, Mission] = {}
        duplicate_ids = []
        for mission in sorted(missions, key=lambda m: (m.slot_number, m.id)):
            if mission.slot_number in kept:
                duplicate_ids.append(mission.id)
            else:
                kept[mission.slot_number] = mission

        if duplicate_ids:
            logger.warning(
                "event=mission.duplicates_found | user_id=%s | ids=%s",
                missions[0].user_id, duplicate_ids,
            )
            self.pending_cleanup = _cleanup_executor.submit(
                _delete_duplicate_missions, self.session_factory, duplicate_ids
            )
        return list(kept.values())

    # ===== Template selection =====

    def _get_restaurant(self, user_id: int) -> Optional[Restaurant]:
        return self.db.query(Restaurant).filter(Restaurant.user_id == user_id).first()

    def _get_strategy_id(self, user_id: int) -> Optional[int]:
        restaurant = self._get_restaurant(user_id)
        return restaurant.strategy_id if restaurant else None

    def _completed_template_ids(self, user_id: int) -> set[int]:
        rows = (
            self.db.query(Mission.mission_template_id)
            .filter(Mission.user_id == user_id, Mission.status == MissionStatus.COMPLETED.value)
            .distinct()
            .all()
        )
        return {row.mission_template_id for row in rows}

    def _completed_tutorial_ids(self, user_id: int) -> set[int]:
        rows = self.db.query(TutorialCompletion.tutorial_id).filter(TutorialCompletion.user_id == user_id).all()
        return {row.tutorial_id for row in rows}

    def _prescribe_daily_missions(self, user_id: int, now: datetime) -> list[Mission]:
        """Pick and persist one template per slot (caller holds the lock and commits)"""
        restaurant = self._get_restaurant(user_id)
        if not restaurant or not restaurant.strategy_id:
            logger.info("event=mission.no_strategy | user_id=%s", user_id)
            return []

        publication_day = is_publication_day(restaurant.publication_rhythm, now.date())
        completed_template_ids = self._completed_template_ids(user_id)
        completed_tutorial_ids = self._completed_tutorial_ids(user_id)

        used_template_ids: set[int] = set()
        used_types: set[str] = set()
        missions = []

        for rule in SLOT_RULES:
            template = self._select_template(
                restaurant.strategy_id,
                rule.type_tiers,
                completed_template_ids,
                used_template_ids,
                used_types,
                completed_tutorial_ids,
            )
            if not template:
                logger.info("event=mission.slot_skipped | user_id=%s | slot=%s", user_id, rule.slot_number)
                continue

            mission = Mission(
                user_id=user_id,
                mission_template_id=template.id,
                mission_template=template,
                status=MissionStatus.PENDING.value,
                assigned_at=now,
                slot_number=rule.slot_number,
                is_recommended=rule.is_recommended(publication_day),
                used_pass=False,
                used_reload=False,
            )
            self.db.add(mission)
            missions.append(mission)
            used_template_ids.add(template.id)
            used_types.add(template.type)

        self.db.flush()
        return missions

    def _eligible_templates(
        self,
        strategy_id: int,
        types: Optional[Iterable[str]],
        completed_tutorial_ids: set[int],
    ) -> list[MissionTemplate]:
        """Active templates of the strategy whose prerequisite tutorial (if any) is completed"""
        prerequisite_met = MissionTemplate.required_tutorial_id.is_(None)
        if completed_tutorial_ids:
            prerequisite_met = or_(
                prerequisite_met,
                MissionTemplate.required_tutorial_id.in_(sorted(completed_tutorial_ids)),
            )

        query = self.db.query(MissionTemplate).filter(
            MissionTemplate.strategy_id == strategy_id,
            MissionTemplate.is_active.is_(True),
            prerequisite_met,
        )
        if types is not None:
            query = query.filter(MissionTemplate.type.in_(list(types)))
        return query.order_by(MissionTemplate.id.asc()).all()

    def _select_template(
        self,
        strategy_id: int,
        type_tiers: tuple[tuple[str, ...], ...],
        completed_template_ids: set[int],
        used_template_ids: set[int],
        used_types: set[str],
        completed_tutorial_ids: set[int],
    ) -> Optional[MissionTemplate]:
        """
        Random template for a slot.

        Types already taken by an earlier slot are excluded. Every tier is
        searched for a template never completed before any tier falls back
        to completed ones, so the fallback only applies once the slot's
        whole catalog is exhausted.
        """
        tier_candidates = []
        for tier in type_tiers:
            available_types = [t for t in tier if t not in used_types]
            if not available_types:
                continue
            candidates = [
                t for t in self._eligible_templates(strategy_id, available_types, completed_tutorial_ids)
                if t.id not in used_template_ids
            ]
            tier_candidates.append(candidates)

        for candidates in tier_candidates:
            fresh = [t for t in candidates if t.id not in completed_template_ids]
            if fresh:
                return self.rng.choice(fresh)

        for candidates in tier_candidates:
            if candidates:
                return self.rng.choice(candidates)
        return None

    # ===== Completion =====

    def complete_mission(self, mission_id: int, user_id: int) -> MissionResult:
        """Complete a pending mission and run the gamification side effects once"""
        if not self._mark_completed(mission_id, user_id):
            exists = (
                self.db.query(Mission.id)
                .filter(Mission.id == mission_id, Mission.user_id == user_id)
                .first()
            )
            return MissionResult.fail(
                MissionErrorCode.ALREADY_PROCESSED if exists else MissionErrorCode.NOT_FOUND
            )

        self._run_completion_effects(user_id, self.db.get(Mission, mission_id))
        return MissionResult.ok(mission_id=mission_id)

    def complete_tuto_mission(self, user_id: int, tutorial_id: int) -> MissionResult:
        """Complete today's pending tuto mission linked to the tutorial, if there is one"""
        start, end = utc_day_bounds(self.clock())
        mission = (
            self.db.query(Mission)
            .join(MissionTemplate, Mission.mission_template_id == MissionTemplate.id)
            .filter(
                Mission.user_id == user_id,
                Mission.status == MissionStatus.PENDING.value,
                Mission.assigned_at >= start,
                Mission.assigned_at < end,
                MissionTemplate.type == MissionType.TUTO.value,
                MissionTemplate.tutorial_id == tutorial_id,
            )
            .order_by(Mission.slot_number.asc())
            .first()
        )
        if not mission or not self._mark_completed(mission.id, user_id):
            return MissionResult.fail()

        self._run_completion_effects(user_id, self.db.get(Mission, mission.id))
        return MissionResult.ok(mission_id=mission.id)

    def _mark_completed(self, mission_id: int, user_id: int) -> bool:
        """Atomic pending -> completed; False when the mission was not pending"""
        updated = self.db.execute(
            update(Mission)
            .where(
                Mission.id == mission_id,
                Mission.user_id == user_id,
                Mission.status == MissionStatus.PENDING.value,
            )
            .values(status=MissionStatus.COMPLETED.value, completed_at=self.clock())
            .execution_options(synchronize_session=False)
        ).rowcount
        self.db.commit()
        if updated:
            logger.info("event=mission.completed | user_id=%s | mission_id=%s", user_id, mission_id)
        return bool(updated)

    def _run_side_effect(self, name: str, user_id: int, func: Callable, *args):
        """Run one post-completion effect; failures are logged, never raised"""
        try:
            return func(*args)
        except Exception:
            self.db.rollback()
            logger.exception("event=mission.side_effect_failed | effect=%s | user_id=%s", name, user_id)
            return None

    def _run_completion_effects(self, user_id: int, mission: Mission) -> None:
        today = self.clock().date()
        streak = self._run_side_effect(
            "streak", user_id, self.gamification_service.update_streak, user_id, today
        )
        current_streak = streak.current_streak if streak else 0
        new_badges = self._run_side_effect(
            "badges", user_id, self.gamification_service.check_badge_unlocks, user_id
        ) or []

        self._run_side_effect(
            "notifications", user_id, self._notify_completion, user_id, mission, current_streak, new_badges
        )
        self._run_side_effect(
            "statistics", user_id, self.statistics_service.calculate_daily_stats, user_id, today
        )
        self._run_side_effect("xp", user_id, self._award_completion_xp, user_id, current_streak, len(new_badges))

    def _notify_completion(self, user_id: int, mission: Mission, current_streak: int, new_badges: list) -> None:
        template_title = mission.mission_template.title if mission and mission.mission_template else "du jour"
        self.notification_service.create(
            user_id=user_id,
            type=NotificationType.MISSION_COMPLETED.value,
            title="Mission accomplie ! 🎉",
            body=f'Bravo ! Tu as terminé la mission "{template_title}"',
            data={"missionId": mission.id if mission else None, "url": "/missions"},
        )

        if current_streak > 0 and current_streak % STREAK_MILESTONE_DAYS == 0:
            self.notification_service.create(
                user_id=user_id,
                type=NotificationType.STREAK_MILESTONE.value,
                title=f"{current_streak} jours de suite ! 🔥",
                body=f"Incroyable ! Tu as maintenu ta série pendant {current_streak} jours consécutifs.",
                data={"streak": current_streak},
            )

        for badge in new_badges:
            self.notification_service.create(
                user_id=user_id,
                type=NotificationType.BADGE_EARNED.value,
                title=f"Badge débloqué : {badge.name} 🏆",
                body=badge.description or f'Tu as débloqué le badge "{badge.name}" !',
                data={"badgeId": badge.id, "badgeSlug": badge.slug},
            )

    def _award_completion_xp(self, user_id: int, current_streak: int, badge_count: int) -> None:
        self.level_service.add_xp(user_id, XpActionType.MISSION_COMPLETED.value)
        if current_streak > 0:
            self.level_service.add_xp(user_id, XpActionType.STREAK_DAY.value)
            if current_streak % STREAK_MILESTONE_DAYS == 0:
                self.level_service.add_xp(user_id, XpActionType.WEEKLY_STREAK.value)
        for _ in range(badge_count):
            self.level_service.add_xp(user_id, XpActionType.BADGE_EARNED.value)

    # ===== Skip / reload =====

    def get_user_mission(self, mission_id: int, user_id: int) -> Optional[Mission]:
        return self.db.query(Mission).filter(Mission.id == mission_id, Mission.user_id == user_id).first()

    def skip_mission(self, mission_id: int, user_id: int) -> MissionResult:
        """Skip a mission of today (uses the mission's one pass/reload action)"""
        mission = self.get_user_mission(mission_id, user_id)
        if not mission:
            return MissionResult.fail(MissionErrorCode.NOT_FOUND)
        if not mission.can_use_pass_or_reload(self.clock().date()):
            return MissionResult.fail(MissionErrorCode.ACTION_ALREADY_USED)

        updated = self.db.execute(
            update(Mission)
            .where(
                Mission.id == mission_id,
                Mission.status == MissionStatus.PENDING.value,
                Mission.used_pass.is_(False),
                Mission.used_reload.is_(False),
            )
            .values(status=MissionStatus.SKIPPED.value, used_pass=True)
            .execution_options(synchronize_session=False)
        ).rowcount
        self.db.commit()
        if not updated:
            return MissionResult.fail(MissionErrorCode.ACTION_ALREADY_USED)

        logger.info("event=mission.skipped | user_id=%s | mission_id=%s", user_id, mission_id)
        return MissionResult.ok(mission_id=mission_id)

    def reload_mission(self, mission_id: int, user_id: int) -> MissionResult:
        """Swap the template of a mission of today for another one"""
        mission = self.get_user_mission(mission_id, user_id)
        if not mission:
            return MissionResult.fail(MissionErrorCode.NOT_FOUND)
        if not mission.can_use_pass_or_reload(self.clock().date()):
            return MissionResult.fail(MissionErrorCode.ACTION_ALREADY_USED)

        strategy_id = self._get_strategy_id(user_id)
        if not strategy_id:
            return MissionResult.fail(MissionErrorCode.NO_STRATEGY)

        start, end = utc_day_bounds(self.clock())
        used_today = {m.mission_template_id for m in self._fetch_missions_between(user_id, start, end)}
        used_today.add(mission.mission_template_id)
        candidates = [
            t for t in self._eligible_templates(strategy_id, None, self._completed_tutorial_ids(user_id))
            if t.id not in used_today
        ]
        if not candidates:
            return MissionResult.fail(MissionErrorCode.NO_ALTERNATIVE)

        template = self.rng.choice(candidates)
        updated = self.db.execute(
            update(Mission)
            .where(
                Mission.id == mission_id,
                Mission.status == MissionStatus.PENDING.value,
                Mission.used_pass.is_(False),
                Mission.used_reload.is_(False),
            )
            .values(mission_template_id=template.id, used_reload=True)
            .execution_options(synchronize_session=False)
        ).rowcount
        self.db.commit()
        if not updated:
            return MissionResult.fail(MissionErrorCode.ACTION_ALREADY_USED)
        self.db.refresh(mission)

        logger.info(
            "event=mission.reloaded | user_id=%s | mission_id=%s | template_id=%s",
            user_id, mission_id, template.id,
        )
        return MissionResult.ok(mission_id=mission.id, mission=MissionResponse.model_validate(mission))

    # ===== History / planning =====

    def get_mission_history(self, user_id: int, limit: Optional[int] = None) -> list[Mission]:
        return (
            self.db.query(Mission)
            .filter(Mission.user_id == user_id)
            .order_by(Mission.assigned_at.desc(), Mission.slot_number.asc())
            .limit(limit or self.settings.mission_history_limit)
            .all()
        )

    def get_planned_mission_days(
        self,
        rhythm: Optional[str],
        days_ahead: Optional[int] = None,
        start: Optional[date] = None,
    ) -> list[date]:
        """Upcoming UTC dates that are publication days for the rhythm"""
        start = start or self.clock().date()
        return planned_days(rhythm, start, days_ahead or self.settings.planned_days_ahead)
