"""루트 생성기 — 층 기반 가중치 엔트리 선택 → 정의 조회 → 수식어 부착"""

from __future__ import annotations

import logging
import math
import random
import uuid
from typing import Optional

from .instance import EquipmentInstance
from .models import (
    MAX_FLOOR_BONUS,
    MAX_TIER,
    RARITY_BONUS_PER_FLOOR,
    RARITY_WEIGHTS,
    ItemDefinition,
    ItemRarity,
    LootTable,
    LootTableEntry,
    calculate_tier,
)
from .modifier_generator import ModifierGenerator
from .modifiers import Curse, Enchantment, StatMode
from .registry import DOMAIN_ITEM, DOMAIN_LOOT_TABLE, DefinitionRegistry

logger = logging.getLogger(__name__)

# === 희귀도별 인챈트 시도 횟수 ===
ENCHANTMENT_ATTEMPTS: dict[ItemRarity, int] = {
    ItemRarity.COMMON: 1,
    ItemRarity.UNCOMMON: 1,
    ItemRarity.RARE: 2,
    ItemRarity.EPIC: 3,
    ItemRarity.LEGENDARY: 4,
    ItemRarity.UNIQUE: 5,
}

# === 희귀도별 보너스 스탯 개수 ===
BONUS_STAT_COUNT: dict[ItemRarity, int] = {
    ItemRarity.COMMON: 0,
    ItemRarity.UNCOMMON: 1,
    ItemRarity.RARE: 2,
    ItemRarity.EPIC: 3,
    ItemRarity.LEGENDARY: 4,
    ItemRarity.UNIQUE: 5,
}
BONUS_STAT_RATIO = 0.1

# === 생성 시 감정 상태 확률 ===
IDENTIFIED_CHANCE: dict[ItemRarity, float] = {
    ItemRarity.COMMON: 0.9,
    ItemRarity.UNCOMMON: 0.7,
    ItemRarity.RARE: 0.4,
    ItemRarity.EPIC: 0.2,
    ItemRarity.LEGENDARY: 0.1,
    ItemRarity.UNIQUE: 0.05,
}
IDENTIFY_BONUS_PER_FLOOR = 0.01
IDENTIFY_BONUS_CAP = 0.3

# === 보스 루트 ===
BOSS_FLOOR_OFFSET = 2
BOSS_MAX_DRAWS = 3


class LootGenerator:
    """루트 테이블 → EquipmentInstance 목록.

    난수는 ModifierGenerator와 같은 rng 하나를 공유한다 (시드 하나로 전체 재현).
    """

    def __init__(
        self,
        registry: DefinitionRegistry,
        modifier_generator: ModifierGenerator,
        rng: Optional[random.Random] = None,
        rarity_weights: Optional[dict[ItemRarity, float]] = None,
        rarity_bonus_per_floor: float = RARITY_BONUS_PER_FLOOR,
        stat_mode: StatMode = StatMode.DECLARED,
    ) -> None:
        self._registry = registry
        self._modifiers = modifier_generator
        self._rng = rng or modifier_generator.rng
        self._rarity_weights = rarity_weights or RARITY_WEIGHTS
        self._rarity_bonus_per_floor = rarity_bonus_per_floor
        self._stat_mode = stat_mode

    # === 선택 ===

    def adjusted_weight(self, entry: LootTableEntry, floor: int, table: LootTable) -> float:
        """weight * (rarity_weight/100) * (1 + min(floor*bonus, 0.5) + rarity_bias)"""
        rarity_multiplier = self._rarity_weights.get(entry.rarity, 100) / 100
        floor_bonus = min(floor * self._rarity_bonus_per_floor, MAX_FLOOR_BONUS)
        return entry.weight * rarity_multiplier * (1 + floor_bonus + table.rarity_bias)

    def select_entry(self, table: LootTable, floor: int) -> Optional[LootTableEntry]:
        """층 범위 필터 후 누적 가중치 균등 추첨. 후보 없음 → None (에러 아님)."""
        candidates = [e for e in table.entries if e.allows_floor(floor)]
        if not candidates:
            return None

        weights = [max(0.0, self.adjusted_weight(e, floor, table)) for e in candidates]
        total = sum(weights)
        if total <= 0:
            return None

        roll = self._rng.random() * total
        cumulative = 0.0
        for entry, weight in zip(candidates, weights):
            cumulative += weight
            if roll < cumulative:
                return entry
        return candidates[-1]

    # === 생성 ===

    def generate(
        self, table_id: str, floor: int, quantity: int = 1
    ) -> list[EquipmentInstance]:
        """quantity회 독립 추첨 (중복 허용). 미등록 테이블 → [] + 경고."""
        table = self._registry.query(DOMAIN_LOOT_TABLE, table_id)
        if table is None:
            logger.warning("No loot table found for ID: %s", table_id)
            return []

        results: list[EquipmentInstance] = []
        for _ in range(quantity):
            entry = self.select_entry(table, floor)
            if entry is None:
                logger.debug("No eligible entries in %s for floor %d", table_id, floor)
                continue
            results.extend(self._create_from_entry(entry, table, floor))

        logger.debug(
            "Generated %d instances from %s (floor=%d, draws=%d)",
            len(results),
            table_id,
            floor,
            quantity,
        )
        return results

    def generate_boss_loot(self, table_id: str, floor: int) -> list[EquipmentInstance]:
        """보스 루트: min(3, floor//5 + 1)회, 2층 앞선 층 기준, 티어 +1."""
        table = self._registry.query(DOMAIN_LOOT_TABLE, table_id)
        if table is None:
            logger.warning("No loot table found for ID: %s", table_id)
            return []

        boss_floor = floor + BOSS_FLOOR_OFFSET
        draws = min(BOSS_MAX_DRAWS, floor // 5 + 1)
        results: list[EquipmentInstance] = []
        for _ in range(draws):
            entry = self.select_entry(table, boss_floor)
            if entry is not None:
                results.extend(
                    self._create_from_entry(entry, table, boss_floor, tier_bonus=1)
                )
        return results

    def _create_from_entry(
        self,
        entry: LootTableEntry,
        table: LootTable,
        floor: int,
        tier_bonus: int = 0,
    ) -> list[EquipmentInstance]:
        definition = self._registry.query(DOMAIN_ITEM, entry.item_id)
        if definition is None:
            logger.warning("No item definition found for: %s", entry.item_id)
            return []

        count = self.resolve_count(entry, table)
        tier = min(MAX_TIER, calculate_tier(floor, entry.rarity) + tier_bonus)

        if definition.stackable:
            stack = min(count, max(1, definition.max_stack))
            return [self._build_instance(definition, entry.rarity, tier, floor, stack)]
        return [
            self._build_instance(definition, entry.rarity, tier, floor, 1)
            for _ in range(count)
        ]

    def resolve_count(self, entry: LootTableEntry, table: LootTable) -> int:
        """[min, max] 균등 정수 (기본 1) × quantity_multiplier, 최소 1."""
        if entry.quantity is None:
            base = 1
        else:
            low, high = entry.quantity
            base = self._rng.randint(low, max(low, high))
        return max(1, round(base * table.quantity_multiplier))

    def _build_instance(
        self,
        definition: ItemDefinition,
        rarity: ItemRarity,
        tier: int,
        floor: int,
        count: int,
    ) -> EquipmentInstance:
        if definition.is_modifiable:
            enchantments = self._roll_enchantments(definition, rarity, tier)
            curses = self._roll_curses(definition, tier)
            bonus_stats = self._roll_bonus_stats(definition, rarity)
            identified = self._roll_identified(rarity, floor)
        else:
            enchantments, curses, bonus_stats, identified = [], [], {}, True

        return EquipmentInstance(
            instance_id=str(uuid.UUID(int=self._rng.getrandbits(128), version=4)),
            definition=definition,
            tier=tier,
            base_stats=dict(definition.base_stats),
            bonus_stats=bonus_stats,
            enchantments=enchantments,
            curses=curses,
            identified=identified,
            count=count,
            stat_mode=self._stat_mode,
            rolled_rarity=rarity,
        )

    # === 부착 규칙 ===

    def _roll_enchantments(
        self, definition: ItemDefinition, rarity: ItemRarity, tier: int
    ) -> list[Enchantment]:
        """희귀도별 시도 횟수만큼 추첨. 같은 종류는 하나만."""
        enchantments: list[Enchantment] = []
        for _ in range(ENCHANTMENT_ATTEMPTS[rarity]):
            enchantment = self._modifiers.generate_enchantment(
                tier, definition.is_weapon, definition.allowed_enchantments or None
            )
            if enchantment and all(e.kind != enchantment.kind for e in enchantments):
                enchantments.append(enchantment)
        return enchantments

    def _roll_curses(self, definition: ItemDefinition, tier: int) -> list[Curse]:
        curse = self._modifiers.generate_curse(tier, definition.possible_curses or None)
        return [curse] if curse else []

    def _roll_bonus_stats(
        self, definition: ItemDefinition, rarity: ItemRarity
    ) -> dict[str, float]:
        """기본 스탯 키 중에서 골라 ceil(|base| * 0.1 * (rank+1)), 최소 1. 키당 1회."""
        keys = list(definition.base_stats)
        bonus_count = BONUS_STAT_COUNT[rarity]
        if not keys or bonus_count == 0:
            return {}

        bonus: dict[str, float] = {}
        for _ in range(min(bonus_count, len(keys))):
            stat = self._rng.choice(keys)
            if stat in bonus:
                continue
            base = abs(definition.base_stats[stat])
            bonus[stat] = max(1, math.ceil(base * BONUS_STAT_RATIO * (rarity.rank + 1)))
        return bonus

    def _roll_identified(self, rarity: ItemRarity, floor: int) -> bool:
        floor_bonus = min(floor * IDENTIFY_BONUS_PER_FLOOR, IDENTIFY_BONUS_CAP)
        return self._rng.random() < IDENTIFIED_CHANCE[rarity] + floor_bonus
