"""수식어(인챈트/저주) — 닫힌 종류 집합 + 종류별 효과 변환 테이블

스탯 효과는 이 파일의 ENCHANTMENT_TABLE / CURSE_TABLE에서만 정의한다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)

MIN_LEVEL = 1
MAX_LEVEL = 5


class EnchantmentKind(str, Enum):
    # 무기
    SHARPNESS = "sharpness"
    FROST = "frost"
    FIRE = "fire"
    LIGHTNING = "lightning"
    POISON = "poison"
    VAMPIRIC = "vampiric"
    STUNNING = "stunning"
    PENETRATING = "penetrating"
    EXPLOSIVE = "explosive"
    HOLY = "holy"
    VORPAL = "vorpal"
    RETURNING = "returning"

    # 방어구
    PROTECTION = "protection"
    WARMTH = "warmth"
    REFLECTION = "reflection"
    REGENERATION = "regeneration"
    STEALTH = "stealth"
    SPEED = "speed"
    STRENGTH = "strength"
    MAGIC_RESISTANCE = "magic_resistance"
    THORNS = "thorns"
    FEATHERFALL = "featherfall"
    WATERWALKING = "waterwalking"

    # 공용
    LUCK = "luck"
    EXPERIENCE = "experience"
    CHRISTMAS_SPIRIT = "christmas_spirit"
    ELVEN_CRAFTED = "elven_crafted"
    SANTA_BLESSED = "santa_blessed"


class CurseKind(str, Enum):
    # 무기
    DULL = "dull"
    BRITTLE = "brittle"
    CLUMSY = "clumsy"
    BLOODTHIRSTY = "bloodthirsty"
    FREEZING = "freezing"
    HEAVY = "heavy"
    SLIPPERY = "slippery"
    CURSED_ACCURACY = "cursed_accuracy"

    # 방어구
    VULNERABILITY = "vulnerability"
    COLDNESS = "coldness"
    WEIGHT = "weight"
    VISIBILITY = "visibility"
    WEAKNESS = "weakness"
    SLOWNESS = "slowness"
    HUNGER = "hunger"
    EXHAUSTION = "exhaustion"

    # 공용
    NAUGHTY_LIST = "naughty_list"
    BAD_LUCK = "bad_luck"
    KRAMPUS_MARK = "krampus_mark"
    COAL_TOUCH = "coal_touch"
    MELTING = "melting"


class Slot(str, Enum):
    """인챈트 장착 부위 제한. weapon 전용 ↔ armor 전용은 상호 배타."""

    WEAPON = "weapon"
    ARMOR = "armor"
    ANY = "any"


class StatMode(str, Enum):
    """get_final_stats 적용 방식.

    DECLARED: 수식어가 선언한 스탯에만 적용 (기본).
    ALL_STATS: 구버전 호환 — 종류의 주 효과 공식을 아이템의 모든 스탯 키에 적용.
    """

    DECLARED = "declared"
    ALL_STATS = "all_stats"


@dataclass(frozen=True)
class StatEffect:
    """단일 스탯 변환: value = current + per_level * level, minimum 있으면 하한 클램프.

    minimum이 있는 효과는 아이템에 이미 있는 스탯만 건드린다.
    """

    stat: str
    per_level: float
    minimum: Optional[float] = None

    def apply(self, value: float, level: int) -> float:
        result = value + self.per_level * level
        if self.minimum is not None:
            result = max(self.minimum, result)
        return result

    def touches(self, stats: dict[str, float]) -> bool:
        return self.minimum is None or self.stat in stats


@dataclass(frozen=True)
class ModifierSpec:
    """종류별 정적 데이터 (레지스트리 enchantment/curse 도메인에 등록)."""

    kind: EnchantmentKind | CurseKind
    name: str
    rarity_weight: float
    describe: Callable[[int], str]
    effects: tuple[StatEffect, ...] = ()
    slot: Slot = Slot.ANY
    affix: Optional[str] = None  # "Sharp {name}" / "{name} of Protection"
    hidden: bool = False  # 저주 전용: 감정 전 존재 자체가 보이지 않음

    @property
    def primary_effect(self) -> Optional[StatEffect]:
        return self.effects[0] if self.effects else None


def _spec(kind, name, weight, describe, *effects, slot=Slot.ANY, affix=None, hidden=False):
    return ModifierSpec(
        kind=kind,
        name=name,
        rarity_weight=weight,
        describe=describe,
        effects=tuple(effects),
        slot=slot,
        affix=affix,
        hidden=hidden,
    )


_E = EnchantmentKind
_C = CurseKind

ENCHANTMENT_TABLE: dict[EnchantmentKind, ModifierSpec] = {
    s.kind: s
    for s in (
        _spec(_E.SHARPNESS, "Sharpness", 10, lambda p: f"+{p * 2} damage",
              StatEffect("damage", 2), slot=Slot.WEAPON, affix="Sharp {name}"),
        _spec(_E.FROST, "Frost", 8, lambda p: f"{p * 5}% chance to freeze enemies",
              StatEffect("freeze_chance", 5), slot=Slot.WEAPON, affix="Frost {name}"),
        _spec(_E.FIRE, "Fire", 8, lambda p: f"{p * 5}% chance to burn enemies",
              StatEffect("burn_chance", 5), affix="Flaming {name}"),
        _spec(_E.LIGHTNING, "Lightning", 6, lambda p: f"{p * 4}% chance to shock enemies",
              StatEffect("shock_chance", 4)),
        _spec(_E.POISON, "Poison", 7, lambda p: f"{p * 3}% chance to poison enemies",
              StatEffect("poison_chance", 3)),
        _spec(_E.VAMPIRIC, "Vampiric", 4, lambda p: f"Heal {p} HP per enemy killed",
              StatEffect("life_on_kill", 1), slot=Slot.WEAPON),
        _spec(_E.STUNNING, "Stunning", 5, lambda p: f"{p * 2}% chance to stun enemies",
              StatEffect("stun_chance", 2)),
        _spec(_E.PENETRATING, "Penetrating", 4, lambda p: f"Attacks ignore {p * 20}% armor",
              StatEffect("armor_penetration", 20), slot=Slot.WEAPON),
        _spec(_E.EXPLOSIVE, "Explosive", 3, lambda p: f"{p}% chance for AoE damage",
              StatEffect("aoe_chance", 1)),
        _spec(_E.HOLY, "Holy", 5, lambda p: f"+{p * 3} damage vs undead/demons",
              StatEffect("holy_damage", 3), affix="Blessed {name}"),
        _spec(_E.VORPAL, "Vorpal", 1, lambda p: f"{p}% chance for instant kill on crit",
              StatEffect("vorpal_chance", 1)),
        _spec(_E.RETURNING, "Returning", 4, lambda p: f"Returns when thrown, +{p} range",
              StatEffect("range", 1)),
        _spec(_E.PROTECTION, "Protection", 10, lambda p: f"+{p * 2} defense",
              StatEffect("defense", 2), slot=Slot.ARMOR, affix="{name} of Protection"),
        _spec(_E.WARMTH, "Warmth", 9, lambda p: f"+{p * 5} cold resistance",
              StatEffect("warmth", 5), slot=Slot.ARMOR, affix="{name} of Warmth"),
        _spec(_E.REFLECTION, "Reflection", 5, lambda p: f"{p * 10}% chance to reflect spells",
              StatEffect("spell_reflect", 10)),
        _spec(_E.REGENERATION, "Regeneration", 3, lambda p: f"Regenerate {p} HP every 5 turns",
              StatEffect("regeneration", 1), affix="{name} of Regeneration"),
        _spec(_E.STEALTH, "Stealth", 6, lambda p: f"+{p * 10}% stealth chance",
              StatEffect("stealth", 10), slot=Slot.ARMOR),
        _spec(_E.SPEED, "Speed", 7, lambda p: f"+{p * 10}% movement speed",
              StatEffect("move_speed", 10), slot=Slot.ARMOR),
        _spec(_E.STRENGTH, "Strength", 8, lambda p: f"+{p * 2} strength",
              StatEffect("strength", 2)),
        _spec(_E.MAGIC_RESISTANCE, "Magic Resistance", 6, lambda p: f"{p * 15}% magic resistance",
              StatEffect("magic_resistance", 15)),
        _spec(_E.THORNS, "Thorns", 6, lambda p: f"Reflects {p} damage to attackers",
              StatEffect("thorns", 1)),
        _spec(_E.FEATHERFALL, "Featherfall", 4, lambda p: f"Negates fall damage up to {p * 10} floors",
              StatEffect("fall_protection", 10)),
        # 상황 효과, 스탯 변환 없음
        _spec(_E.WATERWALKING, "Waterwalking", 3, lambda p: "Can walk on water/ice"),
        _spec(_E.LUCK, "Luck", 8, lambda p: f"+{p * 3} luck",
              StatEffect("luck", 3)),
        _spec(_E.EXPERIENCE, "Experience", 5, lambda p: f"+{p * 10}% experience gain",
              StatEffect("experience_bonus", 10)),
        # 계절 한정 (전투 쪽에서 판정)
        _spec(_E.CHRISTMAS_SPIRIT, "Christmas Spirit", 2, lambda p: f"+{p} to all stats during December",
              affix="Festive {name}"),
        _spec(_E.ELVEN_CRAFTED, "Elven Crafted", 3, lambda p: f"+{p} to all elven racial bonuses",
              StatEffect("elven_bonus", 1)),
        _spec(_E.SANTA_BLESSED, "Santa Blessed", 1, lambda p: f"+{p * 2} luck, immunity to naughty effects",
              StatEffect("luck", 2), affix="Santa's {name}"),
    )
}

CURSE_TABLE: dict[CurseKind, ModifierSpec] = {
    s.kind: s
    for s in (
        _spec(_C.DULL, "Dullness", 10, lambda s: f"-{s * 2} damage",
              StatEffect("damage", -2, minimum=1), affix="Dull {name}"),
        _spec(_C.BRITTLE, "Brittle", 8, lambda s: f"{s * 10}% chance to break on use",
              StatEffect("break_chance", 10)),
        _spec(_C.CLUMSY, "Clumsy", 9, lambda s: f"-{s * 5}% accuracy",
              StatEffect("accuracy", -5, minimum=0)),
        _spec(_C.BLOODTHIRSTY, "Bloodthirsty", 3, lambda s: f"{s * 10}% chance to attack allies",
              StatEffect("ally_attack_chance", 10), affix="Bloodthirsty {name}", hidden=True),
        _spec(_C.FREEZING, "Freezing", 7, lambda s: f"-{s * 3} warmth per turn",
              StatEffect("warmth_drain", 3), hidden=True),
        _spec(_C.HEAVY, "Heavy", 7, lambda s: f"-{s * 2} speed",
              StatEffect("move_speed", -2)),
        _spec(_C.SLIPPERY, "Slippery", 6, lambda s: f"{s * 3}% chance to drop on hit",
              StatEffect("drop_chance", 3), hidden=True),
        _spec(_C.CURSED_ACCURACY, "Cursed Accuracy", 8, lambda s: f"-{s * 3} accuracy",
              StatEffect("accuracy", -3, minimum=0)),
        _spec(_C.VULNERABILITY, "Vulnerability", 10, lambda s: f"-{s * 2} defense",
              StatEffect("defense", -2, minimum=0), affix="Vulnerable {name}"),
        _spec(_C.COLDNESS, "Coldness", 9, lambda s: f"-{s * 2} cold resistance",
              StatEffect("warmth", -2)),
        _spec(_C.WEIGHT, "Weight", 7, lambda s: f"-{s} speed, +{s} stamina cost",
              StatEffect("move_speed", -1), StatEffect("stamina_cost", 1)),
        _spec(_C.VISIBILITY, "Visibility", 6, lambda s: f"-{s * 10}% stealth",
              StatEffect("stealth", -10)),
        _spec(_C.WEAKNESS, "Weakness", 8, lambda s: f"-{s * 2} strength",
              StatEffect("strength", -2)),
        _spec(_C.SLOWNESS, "Slowness", 7, lambda s: f"-{s * 10}% movement speed",
              StatEffect("move_speed", -10)),
        _spec(_C.HUNGER, "Hunger", 5, lambda s: f"+{s * 20}% food consumption",
              StatEffect("food_consumption", 20), hidden=True),
        _spec(_C.EXHAUSTION, "Exhaustion", 6, lambda s: f"-{s} max stamina",
              StatEffect("max_stamina", -1)),
        _spec(_C.NAUGHTY_LIST, "Naughty List", 2, lambda s: "Krampus hunts you more aggressively",
              affix="Naughty {name}", hidden=True),
        _spec(_C.BAD_LUCK, "Bad Luck", 8, lambda s: f"-{s * 3} luck",
              StatEffect("luck", -3)),
        _spec(_C.KRAMPUS_MARK, "Krampus Mark", 1, lambda s: "Krampus tracks you relentlessly",
              hidden=True),
        _spec(_C.COAL_TOUCH, "Coal Touch", 4, lambda s: f"Food becomes coal {s * 5}% of the time",
              StatEffect("coal_chance", 5), hidden=True),
        _spec(_C.MELTING, "Melting", 6, lambda s: f"Item degrades {s} points per floor",
              StatEffect("degradation", 1), affix="Melting {name}", hidden=True),
    )
}

DEFAULT_CURSE_AFFIX = "Cursed {name}"


def _check_level(level: int) -> None:
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValueError(f"Modifier level out of range 1-5: {level}")


@dataclass(frozen=True)
class Enchantment:
    """인챈트 값 객체. 인스턴스 단위로 새로 생성."""

    kind: EnchantmentKind
    power: int
    description: str

    def __post_init__(self) -> None:
        _check_level(self.power)

    @classmethod
    def create(cls, kind: EnchantmentKind, power: int) -> Enchantment:
        return cls(kind=kind, power=power, description=ENCHANTMENT_TABLE[kind].describe(power))

    @property
    def name(self) -> str:
        return ENCHANTMENT_TABLE[self.kind].name

    @property
    def level(self) -> int:
        return self.power


@dataclass(frozen=True)
class Curse:
    """저주 값 객체. hidden=True면 감정 전 존재가 드러나지 않는다."""

    kind: CurseKind
    severity: int
    description: str
    hidden: bool = False

    def __post_init__(self) -> None:
        _check_level(self.severity)

    @classmethod
    def create(cls, kind: CurseKind, severity: int) -> Curse:
        spec = CURSE_TABLE[kind]
        return cls(
            kind=kind,
            severity=severity,
            description=spec.describe(severity),
            hidden=spec.hidden,
        )

    @property
    def name(self) -> str:
        return CURSE_TABLE[self.kind].name

    @property
    def level(self) -> int:
        return self.severity


Modifier = Enchantment | Curse


def spec_for(modifier: Modifier) -> ModifierSpec:
    if isinstance(modifier, Enchantment):
        return ENCHANTMENT_TABLE[modifier.kind]
    return CURSE_TABLE[modifier.kind]


def _transform(modifier: Modifier, base_value: float, stat: Optional[str]) -> float:
    spec = spec_for(modifier)
    if stat is None:
        effect = spec.primary_effect
    else:
        effect = next((e for e in spec.effects if e.stat == stat), None)
    if effect is None:
        return base_value
    return effect.apply(base_value, modifier.level)


def apply_enchantment_effect(
    enchantment: Enchantment, base_value: float, stat: Optional[str] = None
) -> float:
    """순수 변환. stat 미지정 시 종류의 주 효과, 지정 시 해당 스탯 효과 (없으면 그대로)."""
    return _transform(enchantment, base_value, stat)


def apply_curse_effect(curse: Curse, base_value: float, stat: Optional[str] = None) -> float:
    """순수 변환. 예: Dullness → max(1, base - severity*2)"""
    return _transform(curse, base_value, stat)


def apply_modifier(
    stats: dict[str, float], modifier: Modifier, mode: StatMode = StatMode.DECLARED
) -> None:
    """stats를 제자리에서 변환.

    DECLARED: 선언된 스탯만. 클램프 없는 효과는 없는 키를 0으로 보고 추가.
    ALL_STATS: 주 효과 공식을 현재 모든 키에 적용 (구버전 동작).
    """
    spec = spec_for(modifier)
    if mode == StatMode.ALL_STATS:
        effect = spec.primary_effect
        if effect is None:
            return
        for key in list(stats):
            stats[key] = effect.apply(stats[key], modifier.level)
        return

    for effect in spec.effects:
        if not effect.touches(stats):
            continue
        stats[effect.stat] = effect.apply(stats.get(effect.stat, 0), modifier.level)
