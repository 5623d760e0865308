"""장비 Service — Core↔DB 연결, EventBus 통신

Service → Core, Service → DB 허용.
저장/복원 협력자 역할: EquipmentRecord ↔ EquipmentRecordModel.
"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from src.core.equipment.identification import (
    IdentificationProgress,
    IdentificationScheduler,
    IdentificationTask,
)
from src.core.equipment.instance import EquipmentInstance, EquipmentRecord
from src.core.equipment.loot_generator import LootGenerator
from src.core.equipment.modifiers import CurseKind, StatMode
from src.core.equipment.owner import OwnerActor
from src.core.equipment.registry import DefinitionRegistry
from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger
from src.db.models import EquipmentRecordModel

logger = get_logger(__name__)

SOURCE = "equipment_service"


class EquipmentService:
    """루트 굴림 + 장비 저장/조회 + 감정/저주 해제"""

    def __init__(
        self,
        db: Session,
        event_bus: EventBus,
        registry: DefinitionRegistry,
        loot_generator: LootGenerator,
        stat_mode: StatMode = StatMode.DECLARED,
    ):
        self._db = db
        self._bus = event_bus
        self._registry = registry
        self._loot = loot_generator
        self._stat_mode = stat_mode
        # 감정 대기 중인 인스턴스. 스케줄러와 서비스가 같은 객체를 공유한다
        self._live: dict[str, EquipmentInstance] = {}
        self._scheduler = IdentificationScheduler(
            on_progress=self._on_identification_progress,
            on_complete=self._on_identification_complete,
        )
        self._registry.add_listener(self._on_definition_registered)

    @property
    def scheduler(self) -> IdentificationScheduler:
        return self._scheduler

    @property
    def registry(self) -> DefinitionRegistry:
        return self._registry

    def _emit(self, event_type: str, data: dict[str, Any]) -> None:
        self._bus.emit(GameEvent(event_type=event_type, data=data, source=SOURCE))

    # === 정의 조회 ===

    def get_definition(self, domain: str, definition_id: str) -> Optional[Any]:
        return self._registry.query(domain, definition_id)

    def _on_definition_registered(
        self, domain: str, definition_id: str, definition: Any, replaced: bool
    ) -> None:
        if replaced:
            self._emit(
                EventTypes.DEFINITION_RELOADED,
                {"domain": domain, "definition_id": definition_id},
            )

    # === 루트 ===

    def roll_loot(
        self,
        table_id: str,
        floor: int,
        quantity: int = 1,
        owner_id: Optional[str] = None,
        boss: bool = False,
    ) -> list[EquipmentInstance]:
        """루트 생성 + 전부 저장. loot_generated 이벤트 발행 (결과가 있을 때만)."""
        if boss:
            instances = self._loot.generate_boss_loot(table_id, floor)
        else:
            instances = self._loot.generate(table_id, floor, quantity)

        for instance in instances:
            self._upsert(instance, owner_id=owner_id, floor=floor)
        self._db.commit()

        if instances:
            self._emit(
                EventTypes.LOOT_GENERATED,
                {
                    "table_id": table_id,
                    "floor": floor,
                    "owner_id": owner_id,
                    "instance_ids": [i.instance_id for i in instances],
                },
            )
        logger.info(
            "Rolled %d instances from %s (floor=%d, boss=%s)",
            len(instances),
            table_id,
            floor,
            boss,
        )
        return instances

    # === 저장 / 복원 ===

    def save(
        self,
        instance: EquipmentInstance,
        owner_id: Optional[str] = None,
        floor: Optional[int] = None,
    ) -> None:
        """인스턴스 상태 저장 (upsert). owner_id/floor 미지정 시 기존 값 유지."""
        self._upsert(instance, owner_id=owner_id, floor=floor)
        self._db.commit()

    def _upsert(
        self,
        instance: EquipmentInstance,
        owner_id: Optional[str] = None,
        floor: Optional[int] = None,
    ) -> EquipmentRecordModel:
        record = instance.to_record()
        orm = self._db.get(EquipmentRecordModel, record.instance_id)
        if orm is None:
            orm = EquipmentRecordModel(instance_id=record.instance_id)
            self._db.add(orm)

        orm.item_id = record.item_id
        orm.name = record.name
        orm.count = record.count
        orm.stats = dict(record.stats)
        orm.enchantments = list(record.enchantments)
        orm.curses = list(record.curses)
        orm.enchantment_levels = list(record.enchantment_levels)
        orm.curse_levels = list(record.curse_levels)
        orm.identified = record.identified
        orm.stackable = record.stackable
        orm.cursed_locked = record.cursed_locked
        orm.tier = record.tier
        orm.rarity = record.rarity
        if owner_id is not None:
            orm.owner_id = owner_id
        if floor is not None:
            orm.floor = floor
        return orm

    def get_record(self, instance_id: str) -> Optional[EquipmentRecord]:
        orm = self._db.get(EquipmentRecordModel, instance_id)
        if orm is None:
            return None
        return self._orm_to_record(orm)

    def get_instance(self, instance_id: str) -> Optional[EquipmentInstance]:
        """감정 대기 중이면 그 인스턴스, 아니면 레코드에서 복원.
        레코드 없음 또는 정의 소실 → None.
        """
        live = self._live.get(instance_id)
        if live is not None:
            return live
        return self._load(instance_id)

    def _load(self, instance_id: str) -> Optional[EquipmentInstance]:
        record = self.get_record(instance_id)
        if record is None:
            return None
        return EquipmentInstance.from_record(record, self._registry, self._stat_mode)

    def get_instances_by_owner(self, owner_id: str) -> list[EquipmentInstance]:
        rows = (
            self._db.query(EquipmentRecordModel)
            .filter(EquipmentRecordModel.owner_id == owner_id)
            .order_by(EquipmentRecordModel.created_at)
            .all()
        )
        instances = []
        for orm in rows:
            live = self._live.get(orm.instance_id)
            if live is not None:
                instances.append(live)
                continue
            instance = EquipmentInstance.from_record(
                self._orm_to_record(orm), self._registry, self._stat_mode
            )
            if instance is not None:
                instances.append(instance)
        return instances

    def get_owner_id(self, instance_id: str) -> Optional[str]:
        orm = self._db.get(EquipmentRecordModel, instance_id)
        return orm.owner_id if orm else None

    @staticmethod
    def _orm_to_record(orm: EquipmentRecordModel) -> EquipmentRecord:
        return EquipmentRecord(
            instance_id=orm.instance_id,
            item_id=orm.item_id,
            name=orm.name,
            count=orm.count,
            stats=dict(orm.stats or {}),
            enchantments=list(orm.enchantments or []),
            curses=list(orm.curses or []),
            identified=orm.identified,
            stackable=orm.stackable,
            tier=orm.tier,
            rarity=orm.rarity,
            cursed_locked=orm.cursed_locked,
            enchantment_levels=list(orm.enchantment_levels or []),
            curse_levels=list(orm.curse_levels or []),
        )

    # === 감정 ===

    def _resolve(self, item: EquipmentInstance) -> EquipmentInstance:
        """같은 instance_id가 감정 대기 중이면 그 객체로 대체."""
        return self._live.get(item.instance_id, item)

    def _release(self, instance_id: str) -> None:
        if not self._scheduler.is_item_queued(instance_id):
            self._live.pop(instance_id, None)

    def start_identification(self, owner: OwnerActor, item: EquipmentInstance) -> bool:
        """감정 시작. 즉시 완료(저주+장착)된 경우 started 이벤트 없이 identified만 발행."""
        item = self._resolve(item)
        if not self._scheduler.start(owner, item):
            return False

        task = self._scheduler.get_task(owner, item)
        if task is not None:
            self._live[item.instance_id] = item
            self._emit(
                EventTypes.IDENTIFICATION_STARTED,
                {
                    "owner_id": owner.id,
                    "instance_id": item.instance_id,
                    "duration": task.duration,
                },
            )
        return True

    def cancel_identification(self, owner: OwnerActor, item: EquipmentInstance) -> bool:
        item = self._resolve(item)
        if not self._scheduler.cancel(owner, item):
            return False
        self._release(item.instance_id)
        self._emit(
            EventTypes.IDENTIFICATION_CANCELLED,
            {"owner_id": owner.id, "instance_id": item.instance_id},
        )
        return True

    def instant_identify(self, owner: OwnerActor, item: EquipmentInstance) -> bool:
        return self._scheduler.instant_identify(owner, self._resolve(item))

    def identify_on_equip(self, owner: OwnerActor, item: EquipmentInstance) -> bool:
        return self._scheduler.identify_on_equip(owner, self._resolve(item))

    def identify_on_death(
        self, owner: OwnerActor, items: list[EquipmentInstance]
    ) -> int:
        items = [self._resolve(item) for item in items]
        count = self._scheduler.identify_on_death(owner, items)
        for item in items:
            self._release(item.instance_id)
            self._upsert(item)
        self._db.commit()
        return count

    def tick_identification(self) -> list[IdentificationTask]:
        """스케줄러 1틱 진행. 완료 처리(저장/이벤트)는 완료 콜백에서."""
        return self._scheduler.tick()

    def _on_identification_progress(self, progress: IdentificationProgress) -> None:
        self._emit(
            EventTypes.IDENTIFICATION_PROGRESS,
            {
                "owner_id": progress.owner_id,
                "instance_id": progress.item_id,
                "percent_remaining": progress.percent_remaining,
                "ticks_remaining": progress.ticks_remaining,
            },
        )

    def _on_identification_complete(self, task: IdentificationTask) -> None:
        """저장된 행에 감정 결과(identified, cursed_locked)만 병합한다.
        저주 목록 등 나머지 상태는 저장된 쪽이 기준.
        """
        item = task.item
        self._release(item.instance_id)

        persisted = self._load(item.instance_id)
        if persisted is None:
            persisted = item
        elif persisted is not item:
            persisted.identified = item.identified
            persisted.cursed_locked = item.cursed_locked and persisted.cursed
        self.save(persisted)

        self._emit(
            EventTypes.EQUIPMENT_IDENTIFIED,
            {
                "owner_id": task.owner.id,
                "instance_id": item.instance_id,
                "experience": task.experience,
            },
        )
        if task.curse_bound and persisted.cursed_locked:
            self._emit(
                EventTypes.CURSE_BOUND,
                {
                    "owner_id": task.owner.id,
                    "instance_id": item.instance_id,
                    "curses": [c.kind.value for c in persisted.curses],
                },
            )

    # === 저주 해제 ===

    def remove_curse(
        self, instance_id: str, kind: Optional[CurseKind] = None
    ) -> Optional[int]:
        """저주 해제. kind 지정 시 해당 1개, 미지정 시 전부.
        반환: 제거 수. 인스턴스 없음 → None.
        """
        instance = self.get_instance(instance_id)
        if instance is None:
            return None

        if kind is None:
            removed = instance.remove_all_curses()
        else:
            removed = 1 if instance.remove_curse(kind) else 0

        if removed:
            self.save(instance)
            self._emit(
                EventTypes.CURSE_REMOVED,
                {
                    "instance_id": instance_id,
                    "removed": removed,
                    "remaining": len(instance.curses),
                },
            )
        return removed
