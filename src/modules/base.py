"""모듈 기반 인터페이스"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session


@dataclass
class GameContext:
    """모듈에 전달되는 턴 컨텍스트"""

    player_id: str
    current_floor: int
    current_turn: int
    db_session: Optional[Session] = None

    # 모듈이 턴 결과를 넣는 확장 슬롯
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Action:
    """모듈이 제공하는 행동"""

    name: str  # 액션 식별자 (예: "identify")
    display_name: str
    module_name: str
    description: str = ""
    params: Dict[str, Any] = field(default_factory=dict)


class GameModule(ABC):
    """모든 게임 모듈의 기반 인터페이스

    규칙:
    - 모듈은 다른 모듈을 직접 import하지 않는다
    - 모듈 간 통신은 EventBus를 경유한다
    - Module → Service / Core는 허용
    """

    _enabled: bool

    def __init__(self) -> None:
        self._enabled = False

    @property
    @abstractmethod
    def name(self) -> str:
        """모듈 고유 이름 (예: 'equipment')"""
        ...

    @property
    def dependencies(self) -> List[str]:
        return []

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = value

    @abstractmethod
    def on_enable(self) -> None:
        ...

    @abstractmethod
    def on_disable(self) -> None:
        ...

    @abstractmethod
    def on_turn(self, context: GameContext) -> None:
        """매 턴 정확히 1회 호출."""
        ...

    def on_floor_enter(self, floor: int, context: GameContext) -> None:
        """새 층 진입 시 호출. 기본 구현은 무시."""
        return None

    @abstractmethod
    def get_available_actions(self, context: GameContext) -> List[Action]:
        ...
