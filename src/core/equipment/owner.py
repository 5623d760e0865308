"""소유 액터 협력자 계약

Core는 액터 구현을 모른다. 장착 여부 / 경험치 / 지능 / 감정 보조 아이템 보유만 묻는다.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .instance import EquipmentInstance


class OwnerActor(ABC):
    """장비를 소유하는 액터 (플레이어, 동료 등)"""

    @property
    @abstractmethod
    def id(self) -> str:
        """액터 고유 ID — 감정 작업 키의 절반"""
        ...

    @property
    @abstractmethod
    def intelligence(self) -> int:
        ...

    @abstractmethod
    def equip(self, item: EquipmentInstance) -> bool:
        ...

    @abstractmethod
    def unequip(self, item: EquipmentInstance) -> bool:
        ...

    @abstractmethod
    def is_equipped(self, item: EquipmentInstance) -> bool:
        ...

    @abstractmethod
    def gain_experience(self, amount: int) -> None:
        ...

    @abstractmethod
    def has_identification_aid(self) -> bool:
        """감정 보조 아이템 (돋보기, 수정구 등) 보유 여부"""
        ...

    def add_temporary_effect(
        self, name: str, effects: dict[str, Any], duration: int
    ) -> None:
        """지속 효과 부여. duration -1 = 해제 전까지. 기본 구현은 무시."""
        return None
