"""Equipment API — 정의 조회, 루트 굴림, 장비 조회, 저주 해제"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    DefinitionResponse,
    EquipmentInfo,
    LootRollRequest,
    LootRollResponse,
    ModifierInfo,
    RemoveCurseRequest,
    RemoveCurseResponse,
)
from src.core.equipment.instance import EquipmentInstance
from src.core.equipment.models import ItemDefinition, LootTable
from src.core.equipment.modifiers import Curse, CurseKind, Enchantment, ModifierSpec
from src.core.logging import get_logger
from src.services.equipment_service import EquipmentService

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["equipment"])


def get_equipment_service(request: Request) -> EquipmentService:
    """EquipmentService 인스턴스 반환 (의존성 주입)"""
    service: EquipmentService = request.app.state.equipment_service
    return service


# === 변환 ===


def _modifier_info(modifier: Enchantment | Curse) -> ModifierInfo:
    return ModifierInfo(
        kind=modifier.kind.value,
        name=modifier.name,
        level=modifier.level,
        description=modifier.description,
    )


def _build_equipment_info(instance: EquipmentInstance) -> EquipmentInfo:
    if instance.identified:
        stats = instance.get_final_stats()
        enchantments = [_modifier_info(e) for e in instance.enchantments]
    else:
        stats = dict(instance.base_stats)
        enchantments = []

    return EquipmentInfo(
        instance_id=instance.instance_id,
        item_id=instance.item_id,
        display_name=instance.get_display_name(),
        category=instance.category.value,
        rarity=instance.rarity.value,
        tier=instance.tier,
        count=instance.count,
        identified=instance.identified,
        cursed_locked=instance.cursed_locked,
        stats=stats,
        enchantments=enchantments,
        curses=[_modifier_info(c) for c in instance.visible_curses()],
    )


def _definition_to_dict(definition: Any) -> dict[str, Any]:
    if isinstance(definition, ItemDefinition):
        return {
            "item_id": definition.item_id,
            "name": definition.name,
            "category": definition.category.value,
            "rarity": definition.rarity.value,
            "base_stats": dict(definition.base_stats),
            "allowed_enchantments": [k.value for k in definition.allowed_enchantments],
            "possible_curses": [k.value for k in definition.possible_curses],
            "stackable": definition.stackable,
            "max_stack": definition.max_stack,
            "description": definition.description,
            "sell_value": definition.sell_value,
            "tags": list(definition.tags),
        }
    if isinstance(definition, LootTable):
        return {
            "table_id": definition.table_id,
            "name": definition.name,
            "rarity_bias": definition.rarity_bias,
            "quantity_multiplier": definition.quantity_multiplier,
            "entries": [
                {
                    "item_id": e.item_id,
                    "rarity": e.rarity.value,
                    "weight": e.weight,
                    "min_floor": e.min_floor,
                    "max_floor": e.max_floor,
                    "quantity": (
                        {"min": e.quantity[0], "max": e.quantity[1]}
                        if e.quantity
                        else None
                    ),
                }
                for e in definition.entries
            ],
        }
    if isinstance(definition, ModifierSpec):
        return {
            "kind": definition.kind.value,
            "name": definition.name,
            "rarity_weight": definition.rarity_weight,
            "slot": definition.slot.value,
            "hidden": definition.hidden,
            "effects": [
                {"stat": e.stat, "per_level": e.per_level, "minimum": e.minimum}
                for e in definition.effects
            ],
        }
    return {"value": repr(definition)}


# === 엔드포인트 ===


@router.get("/definitions/{domain}/{definition_id}", response_model=DefinitionResponse)
def get_definition(
    domain: str,
    definition_id: str,
    service: EquipmentService = Depends(get_equipment_service),
) -> DefinitionResponse:
    definition = service.get_definition(domain, definition_id)
    if definition is None:
        raise HTTPException(
            status_code=404, detail=f"Definition not found: {domain}/{definition_id}"
        )
    return DefinitionResponse(
        domain=domain,
        definition_id=definition_id,
        definition=_definition_to_dict(definition),
    )


@router.post("/loot/roll", response_model=LootRollResponse)
def roll_loot(
    request: LootRollRequest,
    service: EquipmentService = Depends(get_equipment_service),
) -> LootRollResponse:
    instances = service.roll_loot(
        table_id=request.table_id,
        floor=request.floor,
        quantity=request.quantity,
        owner_id=request.owner_id,
        boss=request.boss,
    )
    return LootRollResponse(
        table_id=request.table_id,
        floor=request.floor,
        items=[_build_equipment_info(i) for i in instances],
    )


@router.get("/equipment/{instance_id}", response_model=EquipmentInfo)
def get_equipment(
    instance_id: str,
    service: EquipmentService = Depends(get_equipment_service),
) -> EquipmentInfo:
    instance = service.get_instance(instance_id)
    if instance is None:
        raise HTTPException(status_code=404, detail=f"Equipment not found: {instance_id}")
    return _build_equipment_info(instance)


@router.post("/equipment/{instance_id}/remove-curse", response_model=RemoveCurseResponse)
def remove_curse(
    instance_id: str,
    request: RemoveCurseRequest,
    service: EquipmentService = Depends(get_equipment_service),
) -> RemoveCurseResponse:
    kind = None
    if request.curse is not None:
        try:
            kind = CurseKind(request.curse)
        except ValueError:
            raise HTTPException(
                status_code=422, detail=f"Unknown curse kind: {request.curse}"
            )

    removed = service.remove_curse(instance_id, kind)
    if removed is None:
        raise HTTPException(status_code=404, detail=f"Equipment not found: {instance_id}")

    instance = service.get_instance(instance_id)
    if instance is None:
        raise HTTPException(status_code=404, detail=f"Equipment not found: {instance_id}")
    logger.info("Removed %d curses from %s", removed, instance_id)
    return RemoveCurseResponse(
        instance_id=instance_id,
        removed=removed,
        remaining_curses=len(instance.curses),
        cursed_locked=instance.cursed_locked,
    )
