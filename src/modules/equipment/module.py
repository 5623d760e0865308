"""EquipmentModule — GameModule 인터페이스

감정 스케줄러의 턴 드라이버. on_turn마다 정확히 1틱 진행한다.
"""

import logging
from typing import List

from src.modules.base import Action, GameContext, GameModule
from src.services.equipment_service import EquipmentService

logger = logging.getLogger(__name__)


class EquipmentModule(GameModule):
    """장비 시스템 모듈

    담당:
    - 감정 대기열 틱 진행, 완료 결과를 context.extra["equipment"]에 공급
    - 장비 관련 액션 제공 (identify, cancel_identify, remove_curse)

    의존성: []
    """

    def __init__(self, equipment_service: EquipmentService) -> None:
        super().__init__()
        self._service = equipment_service

    @property
    def name(self) -> str:
        return "equipment"

    def on_enable(self) -> None:
        pass

    def on_disable(self) -> None:
        # 진행 중 감정은 비활성화 동안 멈춘다 (취소 아님)
        pass

    def on_turn(self, context: GameContext) -> None:
        completed = self._service.tick_identification()
        context.extra["equipment"] = {
            "identified": [task.item.instance_id for task in completed],
            "curse_bound": [
                task.item.instance_id for task in completed if task.curse_bound
            ],
            "active_identifications": self._service.scheduler.active_count,
        }
        if completed:
            logger.debug(
                "Turn %d: %d identifications completed",
                context.current_turn,
                len(completed),
            )

    def on_floor_enter(self, floor: int, context: GameContext) -> None:
        context.current_floor = floor

    def get_available_actions(self, context: GameContext) -> List[Action]:
        items = self._service.get_instances_by_owner(context.player_id)
        actions: List[Action] = []

        if any(not item.identified for item in items):
            actions.append(
                Action(
                    name="identify",
                    display_name="Identify",
                    module_name=self.name,
                    description="장비 감정 시작",
                    params={"instance_id": "str"},
                )
            )
            actions.append(
                Action(
                    name="cancel_identify",
                    display_name="Stop Identifying",
                    module_name=self.name,
                    description="진행 중 감정 취소",
                    params={"instance_id": "str"},
                )
            )
        if any(item.cursed and item.identified for item in items):
            actions.append(
                Action(
                    name="remove_curse",
                    display_name="Remove Curse",
                    module_name=self.name,
                    description="저주 해제",
                    params={"instance_id": "str", "curse": "str | None"},
                )
            )
        return actions
