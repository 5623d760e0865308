"""API request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field


# === Request Schemas ===


class LootRollRequest(BaseModel):
    """루트 굴림 요청"""

    table_id: str = Field(..., min_length=1, description="루트 테이블 ID")
    floor: int = Field(..., ge=0, description="던전 층 (깊이)")
    quantity: int = Field(1, ge=1, le=50, description="독립 추첨 횟수")
    owner_id: Optional[str] = Field(None, description="획득 액터 ID")
    boss: bool = Field(False, description="보스 루트 여부")


class RemoveCurseRequest(BaseModel):
    """저주 해제 요청. curse 미지정 시 전체 해제."""

    curse: Optional[str] = Field(None, description="저주 종류 (예: dull)")


# === Response Schemas ===


class ModifierInfo(BaseModel):
    """인챈트/저주 정보"""

    kind: str
    name: str
    level: int
    description: str


class EquipmentInfo(BaseModel):
    """장비 인스턴스 정보. 미감정이면 인챈트와 숨은 저주는 노출하지 않는다."""

    instance_id: str
    item_id: str
    display_name: str
    category: str
    rarity: str
    tier: int
    count: int
    identified: bool
    cursed_locked: bool
    stats: dict[str, float] = {}
    enchantments: list[ModifierInfo] = []
    curses: list[ModifierInfo] = []


class LootRollResponse(BaseModel):
    """루트 굴림 결과"""

    table_id: str
    floor: int
    items: list[EquipmentInfo] = []


class RemoveCurseResponse(BaseModel):
    """저주 해제 결과"""

    instance_id: str
    removed: int
    remaining_curses: int
    cursed_locked: bool


class DefinitionResponse(BaseModel):
    """정의 조회 결과"""

    domain: str
    definition_id: str
    definition: dict[str, Any]
