"""수식어 생성기 — 티어/카테고리 기반 인챈트·저주 추첨"""

from __future__ import annotations

import logging
import random
from typing import Iterable, Optional

from .modifiers import (
    MAX_LEVEL,
    Curse,
    CurseKind,
    Enchantment,
    EnchantmentKind,
    ModifierSpec,
    Slot,
    apply_curse_effect,
    apply_enchantment_effect,
)
from .registry import DOMAIN_CURSE, DOMAIN_ENCHANTMENT, DefinitionRegistry

logger = logging.getLogger(__name__)

# === 인챈트 확률 ===
ENCHANT_CHANCE_PER_TIER = 0.15
ENCHANT_CHANCE_CAP = 0.8

# === 저주 확률 ===
CURSE_BASE_CHANCE = 0.4
CURSE_CHANCE_PER_TIER = 0.08
CURSE_CHANCE_FLOOR = 0.05
HIGH_TIER_CURSE_BONUS = 0.1  # 티어 4+ 강력한 아이템의 대가
HIGH_TIER_THRESHOLD = 4


def enchantment_chance(tier: int) -> float:
    """min(0.8, tier * 0.15)"""
    return min(ENCHANT_CHANCE_CAP, tier * ENCHANT_CHANCE_PER_TIER)


def curse_chance(tier: int) -> float:
    """max(0.05, 0.4 - tier*0.08) + (0.1 if tier >= 4). 의도적으로 비단조."""
    chance = max(CURSE_CHANCE_FLOOR, CURSE_BASE_CHANCE - tier * CURSE_CHANCE_PER_TIER)
    if tier >= HIGH_TIER_THRESHOLD:
        chance += HIGH_TIER_CURSE_BONUS
    return chance


class ModifierGenerator:
    """인챈트/저주 추첨. 가중치는 레지스트리의 enchantment/curse 도메인에서 읽는다.

    모든 난수는 주입된 rng 하나를 거친다 (시드 재현용).
    """

    apply_enchantment_effect = staticmethod(apply_enchantment_effect)
    apply_curse_effect = staticmethod(apply_curse_effect)

    def __init__(
        self,
        registry: DefinitionRegistry,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._registry = registry
        self._rng = rng or random.Random()

    @property
    def rng(self) -> random.Random:
        return self._rng

    def generate_enchantment(
        self,
        tier: int,
        is_weapon: bool,
        allowed: Optional[Iterable[EnchantmentKind]] = None,
    ) -> Optional[Enchantment]:
        """확률 통과 시 인챈트 1개. 무기면 방어구 전용 제외, 반대도 동일."""
        if self._rng.random() >= enchantment_chance(tier):
            return None

        excluded_slot = Slot.ARMOR if is_weapon else Slot.WEAPON
        allowed_set = set(allowed) if allowed else None
        pool = [
            spec
            for spec in self._registry.get_all(DOMAIN_ENCHANTMENT)
            if spec.slot != excluded_slot
            and (allowed_set is None or spec.kind in allowed_set)
        ]
        spec = self._pick(pool)
        if spec is None:
            logger.debug("No enchantment candidates (tier=%d, weapon=%s)", tier, is_weapon)
            return None

        power = min(MAX_LEVEL, self._rng.randrange(3) + max(1, tier - 2))
        return Enchantment.create(spec.kind, power)

    def generate_curse(
        self,
        tier: int,
        allowed: Optional[Iterable[CurseKind]] = None,
    ) -> Optional[Curse]:
        """확률 통과 시 저주 1개. 낮은 티어일수록 심각도가 높다."""
        if self._rng.random() >= curse_chance(tier):
            return None

        allowed_set = set(allowed) if allowed else None
        pool = [
            spec
            for spec in self._registry.get_all(DOMAIN_CURSE)
            if allowed_set is None or spec.kind in allowed_set
        ]
        spec = self._pick(pool)
        if spec is None:
            logger.debug("No curse candidates (tier=%d)", tier)
            return None

        severity = min(MAX_LEVEL, self._rng.randrange(3) + max(1, 4 - tier))
        return Curse.create(spec.kind, severity)

    def _pick(self, pool: list[ModifierSpec]) -> Optional[ModifierSpec]:
        """rarity_weight 가중 추첨. 후보 없음/가중치 합 0 → None."""
        weights = [spec.rarity_weight for spec in pool]
        if not pool or sum(weights) <= 0:
            return None
        return self._rng.choices(pool, weights=weights, k=1)[0]
