"""정의 저장소 — (domain, id) 키의 불변 정의 조회 + JSON 로드 + 핫 리로드"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional

from .models import ItemCategory, ItemDefinition, ItemRarity, LootTable, LootTableEntry
from .modifiers import CURSE_TABLE, ENCHANTMENT_TABLE, CurseKind, EnchantmentKind

logger = logging.getLogger(__name__)

DOMAIN_ITEM = "item"
DOMAIN_LOOT_TABLE = "loot_table"
DOMAIN_ENCHANTMENT = "enchantment"
DOMAIN_CURSE = "curse"

# register 시 호출: (domain, id, definition, replaced)
ReloadListener = Callable[[str, str, Any, bool], None]


class DefinitionRegistry:
    """
    정적 정의 저장소.
    시작 시 1회 채우고 이후 읽기 위주. 생성 로직 없음, 순수 조회.
    """

    def __init__(self) -> None:
        self._domains: dict[str, dict[str, Any]] = {}
        self._listeners: list[ReloadListener] = []

    def add_listener(self, listener: ReloadListener) -> None:
        """register 알림 구독 (서비스 레이어가 EventBus로 중계)."""
        self._listeners.append(listener)

    def register(self, domain: str, definition_id: str, definition: Any) -> None:
        """삽입 또는 덮어쓰기. 같은 값 재등록은 무해 (멱등).
        덮어쓰기 = 핫 리로드, 항목 단위 통째 교체.
        """
        entries = self._domains.setdefault(domain, {})
        replaced = definition_id in entries
        if replaced:
            logger.info("Reloading definition %s/%s", domain, definition_id)
        entries[definition_id] = definition
        for listener in self._listeners:
            listener(domain, definition_id, definition, replaced)

    def query(self, domain: str, definition_id: str) -> Optional[Any]:
        """O(1) 조회. 없으면 None + 경고 (미정의 콘텐츠, 치명적 아님)."""
        definition = self._domains.get(domain, {}).get(definition_id)
        if definition is None:
            logger.warning("Undefined content: %s/%s", domain, definition_id)
        return definition

    def contains(self, domain: str, definition_id: str) -> bool:
        return definition_id in self._domains.get(domain, {})

    def get_all(self, domain: str) -> list[Any]:
        """도메인 전체 정의 반환 (등록 순서)."""
        return list(self._domains.get(domain, {}).values())

    def domains(self) -> list[str]:
        return list(self._domains.keys())

    def count(self, domain: Optional[str] = None) -> int:
        """등록된 정의 수. domain 미지정 시 전체."""
        if domain is not None:
            return len(self._domains.get(domain, {}))
        return sum(len(d) for d in self._domains.values())

    # === 로더 ===

    def register_modifier_tables(self) -> int:
        """내장 인챈트/저주 테이블 등록. 반환: 등록 수."""
        for kind, spec in ENCHANTMENT_TABLE.items():
            self.register(DOMAIN_ENCHANTMENT, kind.value, spec)
        for kind, spec in CURSE_TABLE.items():
            self.register(DOMAIN_CURSE, kind.value, spec)
        return len(ENCHANTMENT_TABLE) + len(CURSE_TABLE)

    def load_items_from_json(self, path: str | Path) -> int:
        """items.json 로드. 반환: 로드된 수량.

        각 객체 → ItemDefinition. 리스트 필드는 tuple로,
        category/rarity/수식어 종류는 문자열 → enum 변환.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f)

        count = 0
        for raw in raw_list:
            try:
                definition = ItemDefinition(
                    item_id=raw["item_id"],
                    name=raw["name"],
                    category=ItemCategory(raw["category"]),
                    rarity=ItemRarity(raw["rarity"]),
                    base_stats={k: float(v) for k, v in raw.get("base_stats", {}).items()},
                    allowed_enchantments=tuple(
                        EnchantmentKind(k) for k in raw.get("allowed_enchantments", [])
                    ),
                    possible_curses=tuple(
                        CurseKind(k) for k in raw.get("possible_curses", [])
                    ),
                    stackable=bool(raw.get("stackable", False)),
                    max_stack=int(raw.get("max_stack", 1)),
                    description=raw.get("description", ""),
                    sell_value=int(raw.get("sell_value", 0)),
                    tags=tuple(raw.get("tags", [])),
                )
                self.register(DOMAIN_ITEM, definition.item_id, definition)
                count += 1
            except (KeyError, ValueError) as e:
                logger.warning(
                    "Failed to load item definition: %s — %s", raw.get("item_id", "?"), e
                )

        logger.info("Loaded %d item definitions from %s", count, path)
        return count

    def load_loot_tables_from_json(self, path: str | Path) -> int:
        """loot_tables.json 로드. 반환: 로드된 테이블 수."""
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f)

        count = 0
        for raw in raw_list:
            try:
                entries = tuple(_parse_entry(e) for e in raw["entries"])
                table = LootTable(
                    table_id=raw["table_id"],
                    entries=entries,
                    name=raw.get("name", ""),
                    rarity_bias=float(raw.get("rarity_bias", 0.0)),
                    quantity_multiplier=float(raw.get("quantity_multiplier", 1.0)),
                )
                self.register(DOMAIN_LOOT_TABLE, table.table_id, table)
                count += 1
            except (KeyError, ValueError) as e:
                logger.warning(
                    "Failed to load loot table: %s — %s", raw.get("table_id", "?"), e
                )

        logger.info("Loaded %d loot tables from %s", count, path)
        return count


def _parse_entry(raw: dict) -> LootTableEntry:
    quantity = raw.get("quantity")
    min_floor = raw.get("min_floor")
    max_floor = raw.get("max_floor")
    return LootTableEntry(
        item_id=raw["item_id"],
        rarity=ItemRarity(raw["rarity"]),
        weight=float(raw["weight"]),
        min_floor=int(min_floor) if min_floor is not None else None,
        max_floor=int(max_floor) if max_floor is not None else None,
        quantity=(int(quantity["min"]), int(quantity["max"])) if quantity else None,
    )


def build_default_registry(
    items_path: str | Path,
    loot_tables_path: str | Path,
) -> DefinitionRegistry:
    """시작 시 1회: 수식어 테이블 + 아이템 + 루트 테이블 적재."""
    registry = DefinitionRegistry()
    registry.register_modifier_tables()
    registry.load_items_from_json(items_path)
    registry.load_loot_tables_from_json(loot_tables_path)
    return registry
