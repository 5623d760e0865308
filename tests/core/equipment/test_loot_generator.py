"""LootGenerator 테스트 — 시드 고정 rng로 통계적 성질 검증"""

from __future__ import annotations

import logging
import random
from collections import Counter

import pytest

from src.core.equipment.instance import EquipmentInstance
from src.core.equipment.loot_generator import LootGenerator
from src.core.equipment.models import (
    ItemCategory,
    ItemDefinition,
    ItemRarity,
    LootTable,
    LootTableEntry,
)
from src.core.equipment.modifier_generator import ModifierGenerator
from src.core.equipment.modifiers import CurseKind, EnchantmentKind, StatMode
from src.core.equipment.registry import DOMAIN_ITEM, DOMAIN_LOOT_TABLE, DefinitionRegistry


def _make_item(
    item_id: str,
    category: ItemCategory = ItemCategory.MISC,
    rarity: ItemRarity = ItemRarity.COMMON,
    base_stats: dict[str, float] | None = None,
    stackable: bool = False,
    max_stack: int = 1,
    **kwargs,
) -> ItemDefinition:
    return ItemDefinition(
        item_id=item_id,
        name=item_id.replace("_", " ").title(),
        category=category,
        rarity=rarity,
        base_stats=base_stats or {},
        stackable=stackable,
        max_stack=max_stack,
        **kwargs,
    )


def _make_setup(
    items: list[ItemDefinition],
    tables: list[LootTable],
    seed: int = 1234,
) -> tuple[LootGenerator, DefinitionRegistry]:
    registry = DefinitionRegistry()
    registry.register_modifier_tables()
    for item in items:
        registry.register(DOMAIN_ITEM, item.item_id, item)
    for table in tables:
        registry.register(DOMAIN_LOOT_TABLE, table.table_id, table)
    rng = random.Random(seed)
    generator = LootGenerator(registry, ModifierGenerator(registry, rng))
    return generator, registry


def _entry(item_id: str, weight: float, rarity: ItemRarity = ItemRarity.COMMON, **kwargs) -> LootTableEntry:
    return LootTableEntry(item_id=item_id, rarity=rarity, weight=weight, **kwargs)


# ── 선택 ──────────────────────────────────────────────────────


class TestSelectEntry:
    def test_weighted_ninety_ten(self) -> None:
        table = LootTable(table_id="t", entries=(_entry("a", 90), _entry("b", 10)))
        generator, _ = _make_setup([_make_item("a"), _make_item("b")], [table])

        draws = 10_000
        counts = Counter(generator.select_entry(table, 0).item_id for _ in range(draws))
        assert counts["a"] / draws == pytest.approx(0.9, abs=0.03)
        assert counts["b"] / draws == pytest.approx(0.1, abs=0.03)

    def test_floor_filter(self) -> None:
        table = LootTable(
            table_id="t",
            entries=(
                _entry("shallow", 10, max_floor=3),
                _entry("deep", 10, min_floor=5),
            ),
        )
        generator, _ = _make_setup([_make_item("shallow"), _make_item("deep")], [table])
        for _ in range(200):
            assert generator.select_entry(table, 1).item_id == "shallow"
            assert generator.select_entry(table, 8).item_id == "deep"

    def test_no_candidates_returns_none(self) -> None:
        table = LootTable(table_id="t", entries=(_entry("deep", 10, min_floor=5),))
        generator, _ = _make_setup([_make_item("deep")], [table])
        assert generator.select_entry(table, 0) is None

    def test_zero_total_weight_returns_none(self) -> None:
        table = LootTable(table_id="t", entries=(_entry("a", 0),))
        generator, _ = _make_setup([_make_item("a")], [table])
        assert generator.select_entry(table, 0) is None

    def test_adjusted_weight_formula(self) -> None:
        table = LootTable(table_id="t", entries=(), rarity_bias=0.25)
        generator, _ = _make_setup([], [table])
        entry = _entry("a", 20, rarity=ItemRarity.RARE)
        # 20 * 0.1 * (1 + min(10*0.02, 0.5) + 0.25) = 2 * 1.45
        assert generator.adjusted_weight(entry, 10, table) == pytest.approx(2.9)
        # 층 보너스 상한 0.5
        assert generator.adjusted_weight(entry, 100, table) == pytest.approx(2 * 1.75)

    def test_rarity_scales_relative_odds(self) -> None:
        table = LootTable(
            table_id="t",
            entries=(_entry("common", 10), _entry("rare", 10, rarity=ItemRarity.RARE)),
        )
        generator, _ = _make_setup([_make_item("common"), _make_item("rare")], [table])
        counts = Counter(generator.select_entry(table, 0).item_id for _ in range(11_000))
        # 100 : 10
        assert counts["rare"] / 11_000 == pytest.approx(1 / 11, abs=0.02)


# ── 생성 ──────────────────────────────────────────────────────


class TestGenerate:
    def test_unknown_table_returns_empty(self, caplog) -> None:
        generator, _ = _make_setup([], [])
        with caplog.at_level(logging.WARNING):
            assert generator.generate("missing", 1) == []
        assert "missing" in caplog.text

    def test_missing_definition_skips_draw(self, caplog) -> None:
        table = LootTable(table_id="t", entries=(_entry("ghost", 10),))
        generator, _ = _make_setup([], [table])
        with caplog.at_level(logging.WARNING):
            assert generator.generate("t", 0, quantity=3) == []
        assert "ghost" in caplog.text

    def test_quantity_is_independent_draws(self) -> None:
        table = LootTable(table_id="t", entries=(_entry("a", 10),))
        generator, _ = _make_setup([_make_item("a")], [table])
        result = generator.generate("t", 0, quantity=4)
        assert len(result) == 4
        assert len({i.instance_id for i in result}) == 4

    def test_stackable_single_instance_capped(self) -> None:
        table = LootTable(
            table_id="t", entries=(_entry("coin", 10, quantity=(50, 60)),)
        )
        generator, _ = _make_setup(
            [_make_item("coin", stackable=True, max_stack=20)], [table]
        )
        result = generator.generate("t", 0)
        assert len(result) == 1
        assert result[0].count == 20

    def test_non_stackable_yields_count_instances(self) -> None:
        table = LootTable(table_id="t", entries=(_entry("rock", 10, quantity=(3, 3)),))
        generator, _ = _make_setup([_make_item("rock")], [table])
        result = generator.generate("t", 0)
        assert len(result) == 3
        assert all(i.count == 1 for i in result)

    def test_quantity_multiplier(self) -> None:
        table = LootTable(
            table_id="t",
            entries=(_entry("coin", 10, quantity=(4, 4)),),
            quantity_multiplier=2.0,
        )
        generator, _ = _make_setup(
            [_make_item("coin", stackable=True, max_stack=99)], [table]
        )
        assert generator.generate("t", 0)[0].count == 8

    def test_tier_from_floor_and_rarity(self) -> None:
        table = LootTable(
            table_id="t", entries=(_entry("gem", 10, rarity=ItemRarity.UNCOMMON),)
        )
        generator, _ = _make_setup([_make_item("gem")], [table])
        # 7 // 5 + 1 = 2
        assert generator.generate("t", 7)[0].tier == 2

    def test_entry_rarity_kept_on_instance_and_record(self) -> None:
        table = LootTable(
            table_id="t", entries=(_entry("gem", 10, rarity=ItemRarity.EPIC),)
        )
        generator, registry = _make_setup([_make_item("gem")], [table])
        [instance] = generator.generate("t", 0)
        assert instance.rarity == ItemRarity.EPIC
        assert instance.to_record().rarity == "epic"

        rebuilt = EquipmentInstance.from_record(instance.to_record(), registry)
        assert rebuilt.rarity == ItemRarity.EPIC

    def test_plain_categories_are_identified_and_unmodified(self) -> None:
        table = LootTable(table_id="t", entries=(_entry("cocoa", 10),))
        generator, _ = _make_setup(
            [_make_item("cocoa", category=ItemCategory.CONSUMABLE)], [table]
        )
        for instance in generator.generate("t", 30, quantity=50):
            assert instance.identified
            assert instance.enchantments == []
            assert instance.curses == []
            assert instance.bonus_stats == {}

    def test_same_seed_reproduces_loot(self) -> None:
        item = _make_item(
            "sword", category=ItemCategory.WEAPON, base_stats={"damage": 6, "accuracy": 80}
        )
        table = LootTable(table_id="t", entries=(_entry("sword", 10, rarity=ItemRarity.EPIC),))
        a, _ = _make_setup([item], [table], seed=99)
        b, _ = _make_setup([item], [table], seed=99)
        records_a = [i.to_record() for i in a.generate("t", 12, quantity=20)]
        records_b = [i.to_record() for i in b.generate("t", 12, quantity=20)]
        assert records_a == records_b


class TestDressing:
    def _weapon_setup(self, rarity: ItemRarity, seed: int = 5, **item_kwargs):
        item = _make_item(
            "sword",
            category=ItemCategory.WEAPON,
            rarity=rarity,
            base_stats={"damage": 6, "accuracy": 80, "weight": 3},
            **item_kwargs,
        )
        table = LootTable(table_id="t", entries=(_entry("sword", 10, rarity=rarity),))
        generator, _ = _make_setup([item], [table], seed=seed)
        return generator

    def test_enchantment_kinds_unique(self) -> None:
        generator = self._weapon_setup(ItemRarity.UNIQUE)
        for instance in generator.generate("t", 25, quantity=200):
            kinds = [e.kind for e in instance.enchantments]
            assert len(kinds) == len(set(kinds))
            assert len(kinds) <= 5

    def test_at_most_one_curse(self) -> None:
        generator = self._weapon_setup(ItemRarity.RARE)
        assert all(len(i.curses) <= 1 for i in generator.generate("t", 5, quantity=200))

    def test_allowed_enchantments_respected(self) -> None:
        allowed = (EnchantmentKind.FIRE,)
        generator = self._weapon_setup(ItemRarity.LEGENDARY, allowed_enchantments=allowed)
        for instance in generator.generate("t", 20, quantity=100):
            assert all(e.kind in allowed for e in instance.enchantments)

    def test_possible_curses_respected(self) -> None:
        possible = (CurseKind.MELTING, CurseKind.BRITTLE)
        generator = self._weapon_setup(ItemRarity.COMMON, possible_curses=possible)
        for instance in generator.generate("t", 0, quantity=200):
            assert all(c.kind in possible for c in instance.curses)

    def test_common_has_no_bonus_stats(self) -> None:
        generator = self._weapon_setup(ItemRarity.COMMON)
        assert all(i.bonus_stats == {} for i in generator.generate("t", 0, quantity=50))

    def test_bonus_stats_use_base_keys(self) -> None:
        generator = self._weapon_setup(ItemRarity.EPIC)
        for instance in generator.generate("t", 10, quantity=50):
            assert set(instance.bonus_stats) <= {"damage", "accuracy", "weight"}
            # rank 3 → ceil(|base| * 0.1 * 4)
            if "accuracy" in instance.bonus_stats:
                assert instance.bonus_stats["accuracy"] == 32

    def test_common_mostly_identified(self) -> None:
        generator = self._weapon_setup(ItemRarity.COMMON)
        result = generator.generate("t", 0, quantity=2000)
        rate = sum(i.identified for i in result) / len(result)
        assert rate == pytest.approx(0.9, abs=0.03)

    def test_stat_mode_propagates(self) -> None:
        item = _make_item("sword", category=ItemCategory.WEAPON, base_stats={"damage": 1})
        table = LootTable(table_id="t", entries=(_entry("sword", 10),))
        registry = DefinitionRegistry()
        registry.register_modifier_tables()
        registry.register(DOMAIN_ITEM, "sword", item)
        registry.register(DOMAIN_LOOT_TABLE, "t", table)
        generator = LootGenerator(
            registry,
            ModifierGenerator(registry, random.Random(1)),
            stat_mode=StatMode.ALL_STATS,
        )
        assert generator.generate("t", 0)[0].stat_mode == StatMode.ALL_STATS


class TestBossLoot:
    def test_draw_count_scales_with_floor(self) -> None:
        table = LootTable(table_id="t", entries=(_entry("rock", 10),))
        generator, _ = _make_setup([_make_item("rock")], [table])
        assert len(generator.generate_boss_loot("t", 0)) == 1
        assert len(generator.generate_boss_loot("t", 5)) == 2
        assert len(generator.generate_boss_loot("t", 40)) == 3

    def test_boss_tier_bonus(self) -> None:
        table = LootTable(table_id="t", entries=(_entry("rock", 10),))
        generator, _ = _make_setup([_make_item("rock")], [table])
        # floor 3 → 보스 층 5 → 5//5 + 0 = 1, +1 = 2
        assert all(i.tier == 2 for i in generator.generate_boss_loot("t", 3))

    def test_unknown_table(self) -> None:
        generator, _ = _make_setup([], [])
        assert generator.generate_boss_loot("nope", 3) == []


class TestSeedCatalog:
    def test_seed_tables_generate(self, registry: DefinitionRegistry) -> None:
        generator = LootGenerator(registry, ModifierGenerator(registry, random.Random(3)))
        for table in registry.get_all(DOMAIN_LOOT_TABLE):
            result = generator.generate(table.table_id, 12, quantity=5)
            assert result, table.table_id
