"""장비 루트/감정 시스템 Core — 순수 Python, DB 무관"""

from .identification import (
    IdentificationProgress,
    IdentificationScheduler,
    IdentificationTask,
    TaskState,
    identification_duration,
    identification_experience,
)
from .instance import EquipmentInstance, EquipmentRecord
from .loot_generator import LootGenerator
from .modifier_generator import ModifierGenerator
from .models import (
    ItemCategory,
    ItemDefinition,
    ItemRarity,
    LootTable,
    LootTableEntry,
    calculate_tier,
)
from .modifiers import (
    Curse,
    CurseKind,
    Enchantment,
    EnchantmentKind,
    StatMode,
    apply_curse_effect,
    apply_enchantment_effect,
)
from .owner import OwnerActor
from .registry import (
    DOMAIN_CURSE,
    DOMAIN_ENCHANTMENT,
    DOMAIN_ITEM,
    DOMAIN_LOOT_TABLE,
    DefinitionRegistry,
    build_default_registry,
)

__all__ = [
    "IdentificationProgress",
    "IdentificationScheduler",
    "IdentificationTask",
    "TaskState",
    "identification_duration",
    "identification_experience",
    "EquipmentInstance",
    "EquipmentRecord",
    "LootGenerator",
    "ModifierGenerator",
    "ItemCategory",
    "ItemDefinition",
    "ItemRarity",
    "LootTable",
    "LootTableEntry",
    "calculate_tier",
    "Curse",
    "CurseKind",
    "Enchantment",
    "EnchantmentKind",
    "StatMode",
    "apply_curse_effect",
    "apply_enchantment_effect",
    "OwnerActor",
    "DOMAIN_CURSE",
    "DOMAIN_ENCHANTMENT",
    "DOMAIN_ITEM",
    "DOMAIN_LOOT_TABLE",
    "DefinitionRegistry",
    "build_default_registry",
]
