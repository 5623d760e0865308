"""감정 스케줄러 — (owner_id, item_id)별 틱 카운트 상태 머신

상태: UNQUEUED → QUEUED(ticks_remaining) → COMPLETED | CANCELLED
tick()은 외부 드라이버가 논리 턴당 정확히 1회 호출한다.
완료된 작업은 tick() 반환 전에 테이블에서 제거된다 (0틱 미완료 상태는 관측 불가).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from .instance import EquipmentInstance
from .modifiers import Curse, CurseKind
from .owner import OwnerActor

logger = logging.getLogger(__name__)

# === 소요 시간 ===
BASE_IDENTIFICATION_TIME = 150  # 틱 (대략 한 층 탐색)
MIN_IDENTIFICATION_TIME = 25
WISDOM_BONUS_THRESHOLD = 10
TICKS_PER_WISDOM = 5

AID_TIME_FACTOR = 0.6
AID_MIN_IDENTIFICATION_TIME = 50

# === 진행 알림 (정보성, 상태 영향 없음) ===
PROGRESS_MARKS: tuple[float, ...] = (0.75, 0.5, 0.25)
FINAL_NOTICE_TICKS = 10

# === 경험치 ===
EXP_PER_TIER = 10
EXP_PER_CURSE = 15
EXP_PER_ENCHANTMENT = 5

PERMANENT_DURATION = -1

# 저주 결속 시 액터에 거는 지속 효과: kind → (효과 이름, 효과 값 생성)
CURSE_BIND_EFFECTS: dict[CurseKind, tuple[str, Callable[[Curse], dict[str, Any]]]] = {
    CurseKind.BLOODTHIRSTY: ("Bloodlust", lambda c: {"attack_allies": True}),
    CurseKind.FREEZING: ("Cursed Cold", lambda c: {"warmth_drain": c.severity * 3}),
    CurseKind.NAUGHTY_LIST: ("Naughty Listed", lambda c: {"krampus_target": True}),
    CurseKind.COAL_TOUCH: ("Midas Curse", lambda c: {"food_to_coal": c.severity * 5}),
}

TaskKey = tuple[str, str]


class TaskState(str, Enum):
    UNQUEUED = "unqueued"
    QUEUED = "queued"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class IdentificationTask:
    """진행 중인 감정 1건. 키 = (owner.id, item.instance_id)"""

    owner: OwnerActor
    item: EquipmentInstance
    duration: int
    ticks_remaining: int
    state: TaskState = TaskState.QUEUED

    # 완료 시 채워짐
    curse_bound: bool = False
    experience: int = 0

    @property
    def key(self) -> TaskKey:
        return (self.owner.id, self.item.instance_id)

    @property
    def percent_complete(self) -> float:
        if self.duration <= 0:
            return 100.0
        return (self.duration - self.ticks_remaining) / self.duration * 100


@dataclass(frozen=True)
class IdentificationProgress:
    """진행 알림 페이로드"""

    owner_id: str
    item_id: str
    percent_remaining: int
    ticks_remaining: int


ProgressListener = Callable[[IdentificationProgress], None]
CompletionListener = Callable[[IdentificationTask], None]


def identification_duration(intelligence: int, has_aid: bool = False) -> int:
    """max(25, 150 - wisdom_bonus*5). 보조 아이템: max(50, floor(t * 0.6)).

    지능에 대해 단조 비증가.
    """
    wisdom_bonus = max(0, intelligence - WISDOM_BONUS_THRESHOLD)
    duration = max(MIN_IDENTIFICATION_TIME, BASE_IDENTIFICATION_TIME - wisdom_bonus * TICKS_PER_WISDOM)
    if has_aid:
        duration = max(AID_MIN_IDENTIFICATION_TIME, math.floor(duration * AID_TIME_FACTOR))
    return duration


def identification_experience(item: EquipmentInstance) -> int:
    """tier*10 + 저주 수*15 + 인챈트 수*5"""
    return (
        item.tier * EXP_PER_TIER
        + len(item.curses) * EXP_PER_CURSE
        + len(item.enchantments) * EXP_PER_ENCHANTMENT
    )


class IdentificationScheduler:
    """감정 대기열 소유자. 전역 상태 없음 — 인스턴스별 테이블.

    (owner, item) 쌍마다 작업은 최대 1개.
    """

    def __init__(
        self,
        on_progress: Optional[ProgressListener] = None,
        on_complete: Optional[CompletionListener] = None,
    ) -> None:
        self._tasks: dict[TaskKey, IdentificationTask] = {}
        self._on_progress = on_progress
        self._on_complete = on_complete

    @staticmethod
    def _key(owner: OwnerActor, item: EquipmentInstance) -> TaskKey:
        return (owner.id, item.instance_id)

    # === 시작 / 취소 ===

    def start(self, owner: OwnerActor, item: EquipmentInstance) -> bool:
        """감정 시작. 이미 감정됨 또는 작업 존재 → False.
        저주 + 장착 중이면 대기열을 거치지 않고 즉시 완료.
        """
        if item.identified:
            logger.debug("Item %s already identified", item.instance_id)
            return False

        key = self._key(owner, item)
        if key in self._tasks:
            logger.debug("Identification already queued: %s", key)
            return False

        duration = identification_duration(
            owner.intelligence, owner.has_identification_aid()
        )
        task = IdentificationTask(
            owner=owner, item=item, duration=duration, ticks_remaining=duration
        )

        if item.cursed and owner.is_equipped(item):
            logger.info("Cursed item %s forces immediate identification", item.instance_id)
            self._complete(task)
            return True

        self._tasks[key] = task
        logger.info(
            "Identification started: owner=%s item=%s duration=%d",
            owner.id,
            item.instance_id,
            duration,
        )
        return True

    def cancel(self, owner: OwnerActor, item: EquipmentInstance) -> bool:
        """작업 취소. 반환: 작업 존재 여부."""
        task = self._tasks.pop(self._key(owner, item), None)
        if task is None:
            return False
        task.state = TaskState.CANCELLED
        logger.info("Identification cancelled: owner=%s item=%s", owner.id, item.instance_id)
        return True

    # === 틱 ===

    def tick(self) -> list[IdentificationTask]:
        """모든 활성 작업 1 감소. 0 도달 시 완료. 반환: 이번 틱에 완료된 작업."""
        completed: list[IdentificationTask] = []
        for key, task in list(self._tasks.items()):
            # 같은 틱의 완료 콜백에서 취소된 작업은 건너뜀
            if self._tasks.get(key) is not task:
                continue

            task.ticks_remaining -= 1
            if task.ticks_remaining <= 0:
                del self._tasks[key]
                if self._complete(task):
                    completed.append(task)
            else:
                self._notify_progress(task)
        return completed

    def _complete(
        self,
        task: IdentificationTask,
        grant_experience: bool = True,
        apply_curse_effects: bool = True,
    ) -> bool:
        """감정 확정. 다른 경로로 이미 감정된 아이템이면 보상 없이 False."""
        item, owner = task.item, task.owner
        task.ticks_remaining = 0
        if not item.identify(owner):
            task.state = TaskState.CANCELLED
            logger.debug("Item %s was identified elsewhere, task dropped", item.instance_id)
            return False
        self._drop_item_tasks(item.instance_id)

        if item.cursed and owner.is_equipped(item):
            item.cursed_locked = True
            task.curse_bound = True
            logger.info("Cursed energy binds %s to owner %s", item.instance_id, owner.id)
            if apply_curse_effects:
                self._apply_curse_effects(owner, item)

        if grant_experience:
            task.experience = identification_experience(item)
            owner.gain_experience(task.experience)

        task.state = TaskState.COMPLETED
        logger.info(
            "Identification completed: owner=%s item=%s exp=%d",
            owner.id,
            item.instance_id,
            task.experience,
        )
        if self._on_complete is not None:
            self._on_complete(task)
        return True

    def _drop_item_tasks(self, instance_id: str) -> None:
        """감정된 아이템을 대상으로 한 다른 소유자의 대기 작업 제거."""
        for key in [k for k in self._tasks if k[1] == instance_id]:
            self._tasks.pop(key).state = TaskState.CANCELLED

    @staticmethod
    def _apply_curse_effects(owner: OwnerActor, item: EquipmentInstance) -> None:
        for curse in item.curses:
            bind = CURSE_BIND_EFFECTS.get(curse.kind)
            if bind is None:
                continue
            name, build = bind
            owner.add_temporary_effect(name, build(curse), PERMANENT_DURATION)

    def _notify_progress(self, task: IdentificationTask) -> None:
        remaining = task.ticks_remaining
        percent: Optional[int] = None
        for mark in PROGRESS_MARKS:
            if remaining == math.floor(task.duration * mark):
                percent = round(mark * 100)
                break
        else:
            if remaining == FINAL_NOTICE_TICKS:
                percent = round(remaining / task.duration * 100)

        if percent is None:
            return

        progress = IdentificationProgress(
            owner_id=task.owner.id,
            item_id=task.item.instance_id,
            percent_remaining=percent,
            ticks_remaining=remaining,
        )
        logger.debug(
            "Identification progress: %s %d%% remaining (%d ticks)",
            task.item.instance_id,
            percent,
            remaining,
        )
        if self._on_progress is not None:
            self._on_progress(progress)

    # === 조회 ===

    def get_task(
        self, owner: OwnerActor, item: EquipmentInstance
    ) -> Optional[IdentificationTask]:
        return self._tasks.get(self._key(owner, item))

    def state(self, owner: OwnerActor, item: EquipmentInstance) -> TaskState:
        """현재 상태. 작업 없음: 감정됨 → COMPLETED, 아니면 UNQUEUED."""
        task = self.get_task(owner, item)
        if task is not None:
            return task.state
        return TaskState.COMPLETED if item.identified else TaskState.UNQUEUED

    def progress(self, owner: OwnerActor, item: EquipmentInstance) -> float:
        """진행률 (0~100). 작업 없으면 0."""
        task = self.get_task(owner, item)
        return task.percent_complete if task else 0.0

    def is_identifying(self, owner: OwnerActor) -> bool:
        return any(key[0] == owner.id for key in self._tasks)

    def item_being_identified(self, owner: OwnerActor) -> Optional[EquipmentInstance]:
        for task in self._tasks.values():
            if task.owner.id == owner.id:
                return task.item
        return None

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    def is_item_queued(self, instance_id: str) -> bool:
        """소유자와 무관하게 이 아이템을 대상으로 한 작업이 있는지."""
        return any(key[1] == instance_id for key in self._tasks)

    # === 특수 감정 ===

    def instant_identify(self, owner: OwnerActor, item: EquipmentInstance) -> bool:
        """감정 스크롤 등 즉시 감정. 대기 중 작업은 흡수.
        경험치와 저주 지속 효과 없음 (장착 중 저주는 잠금만).
        """
        if item.identified:
            return False
        task = IdentificationTask(owner=owner, item=item, duration=0, ticks_remaining=0)
        return self._complete(task, grant_experience=False, apply_curse_effects=False)

    def identify_on_equip(self, owner: OwnerActor, item: EquipmentInstance) -> bool:
        """장착 직후 호출. 미감정 저주 아이템은 본성을 드러낸다."""
        if item.identified or not item.cursed:
            return False
        return self.instant_identify(owner, item)

    def identify_on_death(
        self, owner: OwnerActor, items: Iterable[EquipmentInstance]
    ) -> int:
        """사망 시 장비 전부 감정 (결속 없음). 반환: 새로 감정된 수."""
        count = 0
        for item in items:
            if item.identified:
                continue
            self._drop_item_tasks(item.instance_id)
            item.identify()
            count += 1
        return count
