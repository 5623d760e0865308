"""장비 도메인 모델 (DB 무관)"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .modifiers import CurseKind, EnchantmentKind


class ItemCategory(str, Enum):
    WEAPON = "weapon"
    ARMOR = "armor"
    CONSUMABLE = "consumable"
    ARTIFACT = "artifact"
    MISC = "misc"


class ItemRarity(str, Enum):
    """6단계 순서형 희귀도. 선언 순서 = 랭크."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"
    UNIQUE = "unique"

    @property
    def rank(self) -> int:
        """0-based 순위. COMMON=0 ... UNIQUE=5"""
        return list(ItemRarity).index(self)


# 수식어(인챈트/저주)가 붙는 카테고리
MODIFIABLE_CATEGORIES: frozenset[ItemCategory] = frozenset(
    {ItemCategory.WEAPON, ItemCategory.ARMOR, ItemCategory.ARTIFACT}
)


@dataclass(frozen=True)
class ItemDefinition:
    """아이템 정의 — 불변. items.json에서 로드."""

    item_id: str  # "sharp_icicle_dagger"
    name: str  # "Sharp Icicle Dagger"
    category: ItemCategory
    rarity: ItemRarity

    # 희소 스탯 맵 {"damage": 6, "accuracy": 80}
    base_stats: dict[str, float] = field(default_factory=dict)

    # 비어 있으면 카테고리 규칙 내 전체 허용
    allowed_enchantments: tuple[EnchantmentKind, ...] = ()
    possible_curses: tuple[CurseKind, ...] = ()

    # 스택
    stackable: bool = False
    max_stack: int = 1

    description: str = ""
    sell_value: int = 0
    tags: tuple[str, ...] = ()

    @property
    def is_weapon(self) -> bool:
        return self.category == ItemCategory.WEAPON

    @property
    def is_modifiable(self) -> bool:
        return self.category in MODIFIABLE_CATEGORIES


@dataclass(frozen=True)
class LootTableEntry:
    """루트 테이블 한 줄. min/max_floor None = 해당 방향 무제한."""

    item_id: str
    rarity: ItemRarity
    weight: float
    min_floor: Optional[int] = None
    max_floor: Optional[int] = None
    quantity: Optional[tuple[int, int]] = None  # (min, max) 포함 범위

    def allows_floor(self, floor: int) -> bool:
        if self.min_floor is not None and floor < self.min_floor:
            return False
        if self.max_floor is not None and floor > self.max_floor:
            return False
        return True


@dataclass(frozen=True)
class LootTable:
    """가중치 루트 테이블 — 불변 설정."""

    table_id: str
    entries: tuple[LootTableEntry, ...]
    name: str = ""
    rarity_bias: float = 0.0  # 양수 = 희귀 아이템 쪽으로
    quantity_multiplier: float = 1.0


# === 희귀도별 루트 가중치 (100 = 기준) ===
RARITY_WEIGHTS: dict[ItemRarity, float] = {
    ItemRarity.COMMON: 100,
    ItemRarity.UNCOMMON: 30,
    ItemRarity.RARE: 10,
    ItemRarity.EPIC: 3,
    ItemRarity.LEGENDARY: 1,
    ItemRarity.UNIQUE: 0.5,
}

RARITY_BONUS_PER_FLOOR = 0.02
MAX_FLOOR_BONUS = 0.5

MIN_TIER = 1
MAX_TIER = 5


def calculate_tier(floor: int, rarity: ItemRarity) -> int:
    """tier = clamp(1, 5, floor // 5 + rarity rank)"""
    return max(MIN_TIER, min(MAX_TIER, floor // 5 + rarity.rank))
