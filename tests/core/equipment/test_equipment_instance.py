"""EquipmentInstance 테스트: 최종 스탯, 표시 이름, 감정/저주 잠금, 저장 레코드"""

from __future__ import annotations

from typing import Any

from src.core.equipment.instance import EquipmentInstance, EquipmentRecord
from src.core.equipment.models import ItemCategory, ItemDefinition, ItemRarity
from src.core.equipment.modifiers import (
    Curse,
    CurseKind,
    Enchantment,
    EnchantmentKind,
    StatMode,
)
from src.core.equipment.owner import OwnerActor
from src.core.equipment.registry import DOMAIN_ITEM, DefinitionRegistry


class _FakeOwner(OwnerActor):
    def __init__(self, owner_id: str = "p1", intelligence: int = 10) -> None:
        self._id = owner_id
        self._intelligence = intelligence
        self.equipped: set[str] = set()

    @property
    def id(self) -> str:
        return self._id

    @property
    def intelligence(self) -> int:
        return self._intelligence

    def equip(self, item: EquipmentInstance) -> bool:
        self.equipped.add(item.instance_id)
        return True

    def unequip(self, item: EquipmentInstance) -> bool:
        if not item.can_unequip():
            return False
        self.equipped.discard(item.instance_id)
        return True

    def is_equipped(self, item: EquipmentInstance) -> bool:
        return item.instance_id in self.equipped

    def gain_experience(self, amount: int) -> None:
        pass

    def has_identification_aid(self) -> bool:
        return False


def _make_definition(
    category: ItemCategory = ItemCategory.WEAPON,
    base_stats: dict[str, float] | None = None,
) -> ItemDefinition:
    return ItemDefinition(
        item_id="test_sword",
        name="Test Sword",
        category=category,
        rarity=ItemRarity.RARE,
        base_stats=base_stats if base_stats is not None else {"damage": 5, "accuracy": 80},
    )


def _make_instance(**kwargs: Any) -> EquipmentInstance:
    definition = kwargs.pop("definition", None) or _make_definition()
    defaults: dict[str, Any] = {
        "instance_id": "inst-1",
        "definition": definition,
        "tier": 3,
        "base_stats": dict(definition.base_stats),
    }
    defaults.update(kwargs)
    return EquipmentInstance(**defaults)


# ── 최종 스탯 ─────────────────────────────────────────────────


class TestFinalStats:
    def test_base_only(self) -> None:
        assert _make_instance().get_final_stats() == {"damage": 5, "accuracy": 80}

    def test_bonus_overlay_adds(self) -> None:
        instance = _make_instance(bonus_stats={"damage": 2, "luck": 1})
        assert instance.get_final_stats() == {"damage": 7, "accuracy": 80, "luck": 1}

    def test_enchant_then_curse(self) -> None:
        instance = _make_instance(
            enchantments=[Enchantment.create(EnchantmentKind.SHARPNESS, 2)],
            curses=[Curse.create(CurseKind.DULL, 5)],
        )
        # 5 + 4 = 9, max(1, 9 - 10) = 1
        assert instance.get_final_stats()["damage"] == 1

    def test_pure_and_repeatable(self) -> None:
        instance = _make_instance(
            bonus_stats={"damage": 1},
            enchantments=[Enchantment.create(EnchantmentKind.SHARPNESS, 1)],
        )
        first = instance.get_final_stats()
        second = instance.get_final_stats()
        assert first == second
        assert instance.base_stats == {"damage": 5, "accuracy": 80}

    def test_hidden_curse_active_while_unidentified(self) -> None:
        instance = _make_instance(
            curses=[Curse.create(CurseKind.BLOODTHIRSTY, 2)], identified=False
        )
        assert instance.visible_curses() == []
        assert instance.get_final_stats()["ally_attack_chance"] == 20

        identified = _make_instance(
            curses=[Curse.create(CurseKind.BLOODTHIRSTY, 2)], identified=True
        )
        assert instance.get_final_stats() == identified.get_final_stats()

    def test_all_stats_mode(self) -> None:
        instance = _make_instance(
            enchantments=[Enchantment.create(EnchantmentKind.SHARPNESS, 1)],
            stat_mode=StatMode.ALL_STATS,
        )
        assert instance.get_final_stats() == {"damage": 7, "accuracy": 82}


# ── 표시 이름 ─────────────────────────────────────────────────


class TestDisplayName:
    def test_unidentified_weapon(self) -> None:
        assert _make_instance(tier=4).get_display_name() == "Ornate Weapon"

    def test_unidentified_armor_and_other(self) -> None:
        armor = _make_instance(definition=_make_definition(ItemCategory.ARMOR), tier=1)
        ring = _make_instance(definition=_make_definition(ItemCategory.ARTIFACT), tier=5)
        assert armor.get_display_name() == "Worn Armor"
        assert ring.get_display_name() == "Magnificent Item"

    def test_identified_plain(self) -> None:
        assert _make_instance(identified=True).get_display_name() == "Test Sword"

    def test_identified_enchant_prefix(self) -> None:
        instance = _make_instance(
            identified=True,
            enchantments=[Enchantment.create(EnchantmentKind.SHARPNESS, 1)],
        )
        assert instance.get_display_name() == "Sharp Test Sword"

    def test_identified_enchant_suffix_and_curse(self) -> None:
        instance = _make_instance(
            identified=True,
            enchantments=[Enchantment.create(EnchantmentKind.PROTECTION, 1)],
            curses=[Curse.create(CurseKind.DULL, 1)],
        )
        assert instance.get_display_name() == "Dull Test Sword of Protection"

    def test_default_curse_prefix(self) -> None:
        instance = _make_instance(
            identified=True, curses=[Curse.create(CurseKind.HEAVY, 1)]
        )
        assert instance.get_display_name() == "Cursed Test Sword"


# ── 감정 / 저주 ───────────────────────────────────────────────


class TestIdentifyAndCurses:
    def test_identify_once(self) -> None:
        instance = _make_instance()
        assert instance.identify() is True
        assert instance.identified
        assert instance.identify() is False

    def test_identify_equipped_cursed_locks(self) -> None:
        owner = _FakeOwner()
        instance = _make_instance(curses=[Curse.create(CurseKind.DULL, 1)])
        owner.equip(instance)
        instance.identify(owner)
        assert instance.cursed_locked
        assert not instance.can_unequip()
        assert owner.unequip(instance) is False

    def test_identify_unequipped_does_not_lock(self) -> None:
        owner = _FakeOwner()
        instance = _make_instance(curses=[Curse.create(CurseKind.DULL, 1)])
        instance.identify(owner)
        assert not instance.cursed_locked

    def test_remove_curse(self) -> None:
        instance = _make_instance(
            curses=[Curse.create(CurseKind.DULL, 1), Curse.create(CurseKind.HEAVY, 2)],
            cursed_locked=True,
        )
        assert instance.remove_curse(CurseKind.DULL) is True
        assert instance.cursed_locked  # 아직 하나 남음
        assert instance.remove_curse(CurseKind.DULL) is False
        assert instance.remove_curse(CurseKind.HEAVY) is True
        assert not instance.cursed
        assert not instance.cursed_locked

    def test_remove_all_curses_unlocks(self) -> None:
        owner = _FakeOwner()
        instance = _make_instance(
            curses=[Curse.create(CurseKind.DULL, 1), Curse.create(CurseKind.HEAVY, 1)]
        )
        owner.equip(instance)
        instance.identify(owner)
        assert instance.remove_all_curses() == 2
        assert instance.can_unequip()
        assert instance.remove_all_curses() == 0


# ── 저장 레코드 ───────────────────────────────────────────────


class TestRecord:
    def test_record_fields(self) -> None:
        instance = _make_instance(
            identified=True,
            bonus_stats={"damage": 1},
            enchantments=[Enchantment.create(EnchantmentKind.SHARPNESS, 2)],
            curses=[Curse.create(CurseKind.DULL, 3)],
        )
        record = instance.to_record()
        assert record.item_id == "test_sword"
        assert record.name == "Dull Sharp Test Sword"
        assert record.stats == {"damage": 1}
        assert record.enchantments == ["sharpness"]
        assert record.curses == ["dull"]
        assert record.enchantment_levels == [2]
        assert record.curse_levels == [3]
        assert record.stackable is False

    def test_dict_roundtrip(self) -> None:
        record = _make_instance().to_record()
        assert EquipmentRecord.from_dict(record.to_dict()) == record

    def test_rebuild_from_registry(self) -> None:
        registry = DefinitionRegistry()
        definition = _make_definition()
        registry.register(DOMAIN_ITEM, definition.item_id, definition)
        original = _make_instance(
            bonus_stats={"accuracy": 4},
            enchantments=[Enchantment.create(EnchantmentKind.SHARPNESS, 2)],
            curses=[Curse.create(CurseKind.HEAVY, 1)],
            cursed_locked=True,
        )

        rebuilt = EquipmentInstance.from_record(original.to_record(), registry)
        assert rebuilt is not None
        assert rebuilt.get_final_stats() == original.get_final_stats()
        assert rebuilt.cursed_locked
        assert rebuilt.tier == original.tier

    def test_rebuild_without_levels_defaults_to_one(self) -> None:
        registry = DefinitionRegistry()
        definition = _make_definition()
        registry.register(DOMAIN_ITEM, definition.item_id, definition)
        record = EquipmentRecord(
            instance_id="old",
            item_id="test_sword",
            name="Test Sword",
            count=1,
            stats={},
            enchantments=["sharpness"],
            curses=[],
            identified=True,
            stackable=False,
        )
        rebuilt = EquipmentInstance.from_record(record, registry)
        assert rebuilt.enchantments[0].power == 1

    def test_rebuild_missing_definition(self) -> None:
        record = _make_instance().to_record()
        assert EquipmentInstance.from_record(record, DefinitionRegistry()) is None
