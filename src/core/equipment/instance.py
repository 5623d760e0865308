"""장비 인스턴스 — 최종 스탯 계산, 표시 이름, 감정/저주 잠금 상태"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from .models import ItemCategory, ItemDefinition, ItemRarity
from .modifiers import (
    CURSE_TABLE,
    DEFAULT_CURSE_AFFIX,
    ENCHANTMENT_TABLE,
    Curse,
    CurseKind,
    Enchantment,
    EnchantmentKind,
    StatMode,
    apply_modifier,
)
from .registry import DOMAIN_ITEM

if TYPE_CHECKING:
    from .owner import OwnerActor
    from .registry import DefinitionRegistry

logger = logging.getLogger(__name__)

# 미감정 표시용 티어 서술어 (1~5)
TIER_DESCRIPTORS: dict[int, str] = {
    1: "Worn",
    2: "Plain",
    3: "Fine",
    4: "Ornate",
    5: "Magnificent",
}

CATEGORY_LABELS: dict[ItemCategory, str] = {
    ItemCategory.WEAPON: "Weapon",
    ItemCategory.ARMOR: "Armor",
}
DEFAULT_CATEGORY_LABEL = "Item"


@dataclass
class EquipmentRecord:
    """저장 협력자에게 넘기는 평문 레코드.

    stats는 보너스 오버레이(Definition 대비 Delta)만 담는다.
    기본 스탯은 복원 시 레지스트리에서 다시 해석한다.
    """

    instance_id: str
    item_id: str
    name: str
    count: int
    stats: dict[str, float]
    enchantments: list[str]
    curses: list[str]
    identified: bool
    stackable: bool

    tier: int = 1
    rarity: str = ItemRarity.COMMON.value
    cursed_locked: bool = False
    enchantment_levels: list[int] = field(default_factory=list)
    curse_levels: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EquipmentRecord:
        return cls(**data)


@dataclass
class EquipmentInstance:
    """런타임 장비 개체. LootGenerator가 생성.

    get_final_stats()는 (base, bonus, modifiers)의 순수 함수.
    identified는 표시만 바꾸고 수치는 바꾸지 않는다.
    """

    instance_id: str
    definition: ItemDefinition
    tier: int

    base_stats: dict[str, float] = field(default_factory=dict)
    bonus_stats: dict[str, float] = field(default_factory=dict)

    # 순서: 인챈트 → 저주
    enchantments: list[Enchantment] = field(default_factory=list)
    curses: list[Curse] = field(default_factory=list)

    identified: bool = False
    cursed_locked: bool = False
    count: int = 1
    stat_mode: StatMode = StatMode.DECLARED

    # 루트 엔트리에서 굴린 희귀도. None이면 정의의 희귀도
    rolled_rarity: Optional[ItemRarity] = None

    # === 정의 위임 ===

    @property
    def item_id(self) -> str:
        return self.definition.item_id

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def category(self) -> ItemCategory:
        return self.definition.category

    @property
    def rarity(self) -> ItemRarity:
        return self.rolled_rarity or self.definition.rarity

    @property
    def stackable(self) -> bool:
        return self.definition.stackable

    @property
    def cursed(self) -> bool:
        return bool(self.curses)

    @property
    def modifiers(self) -> list[Enchantment | Curse]:
        return [*self.enchantments, *self.curses]

    # === 스탯 ===

    def get_final_stats(self) -> dict[str, float]:
        """base 복제 → bonus 가산 → 모든 인챈트/저주 적용 (감정 여부 무관)."""
        stats = dict(self.base_stats)
        for key, bonus in self.bonus_stats.items():
            stats[key] = stats.get(key, 0) + bonus
        for modifier in self.modifiers:
            apply_modifier(stats, modifier, self.stat_mode)
        return stats

    # === 표시 ===

    def get_display_name(self) -> str:
        """미감정: "<티어 서술어> <카테고리>". 감정: 인챈트 접사 → 저주 접두사 순."""
        if not self.identified:
            return self.unidentified_name()

        display = self.name
        if self.enchantments:
            affix = ENCHANTMENT_TABLE[self.enchantments[0].kind].affix
            if affix:
                display = affix.format(name=display)
        if self.curses:
            affix = CURSE_TABLE[self.curses[0].kind].affix or DEFAULT_CURSE_AFFIX
            display = affix.format(name=display)
        return display

    def unidentified_name(self) -> str:
        descriptor = TIER_DESCRIPTORS.get(self.tier, "Unknown")
        label = CATEGORY_LABELS.get(self.category, DEFAULT_CATEGORY_LABEL)
        return f"{descriptor} {label}"

    def visible_curses(self) -> list[Curse]:
        """현재 보이는 저주. 미감정이면 hidden 저주 제외."""
        if self.identified:
            return list(self.curses)
        return [c for c in self.curses if not c.hidden]

    # === 감정 / 저주 ===

    def identify(self, owner: Optional[OwnerActor] = None) -> bool:
        """감정. 이미 감정됨 → False (no-op).
        저주가 있고 owner가 장착 중이면 cursed_locked — 저주 제거 전까지 해제 불가.
        """
        if self.identified:
            return False

        self.identified = True
        logger.info("Item %s (%s) identified", self.instance_id, self.item_id)

        if self.curses and owner is not None and owner.is_equipped(self):
            self.cursed_locked = True
            logger.info(
                "Item %s curse-locked to owner %s (%d curses)",
                self.instance_id,
                owner.id,
                len(self.curses),
            )
        return True

    def remove_curse(self, kind: CurseKind) -> bool:
        """해당 종류 저주 1개 제거. 없으면 False."""
        for index, curse in enumerate(self.curses):
            if curse.kind == kind:
                del self.curses[index]
                break
        else:
            return False

        if not self.curses:
            self._clear_curse_lock()
        return True

    def remove_all_curses(self) -> int:
        """전체 저주 제거. 반환: 제거 수."""
        removed = len(self.curses)
        self.curses.clear()
        self._clear_curse_lock()
        return removed

    def _clear_curse_lock(self) -> None:
        if self.cursed_locked:
            logger.info("Curse lock released on %s", self.instance_id)
        self.cursed_locked = False

    def can_unequip(self) -> bool:
        return not self.cursed_locked

    # === 저장 레코드 ===

    def to_record(self) -> EquipmentRecord:
        return EquipmentRecord(
            instance_id=self.instance_id,
            item_id=self.item_id,
            name=self.get_display_name(),
            count=self.count,
            stats=dict(self.bonus_stats),
            enchantments=[e.kind.value for e in self.enchantments],
            curses=[c.kind.value for c in self.curses],
            identified=self.identified,
            stackable=self.stackable,
            tier=self.tier,
            rarity=self.rarity.value,
            cursed_locked=self.cursed_locked,
            enchantment_levels=[e.power for e in self.enchantments],
            curse_levels=[c.severity for c in self.curses],
        )

    @classmethod
    def from_record(
        cls,
        record: EquipmentRecord,
        registry: DefinitionRegistry,
        stat_mode: StatMode = StatMode.DECLARED,
    ) -> Optional[EquipmentInstance]:
        """레코드 → 인스턴스. 정의가 사라졌으면 None (경고는 레지스트리가 남김).
        레벨 목록이 없으면 1로 복원.
        """
        definition = registry.query(DOMAIN_ITEM, record.item_id)
        if definition is None:
            return None

        enchant_levels = record.enchantment_levels or [1] * len(record.enchantments)
        curse_levels = record.curse_levels or [1] * len(record.curses)
        return cls(
            instance_id=record.instance_id,
            definition=definition,
            tier=record.tier,
            base_stats=dict(definition.base_stats),
            bonus_stats=dict(record.stats),
            enchantments=[
                Enchantment.create(EnchantmentKind(kind), level)
                for kind, level in zip(record.enchantments, enchant_levels)
            ],
            curses=[
                Curse.create(CurseKind(kind), level)
                for kind, level in zip(record.curses, curse_levels)
            ],
            identified=record.identified,
            cursed_locked=record.cursed_locked and bool(record.curses),
            count=record.count,
            stat_mode=stat_mode,
            rolled_rarity=ItemRarity(record.rarity),
        )
