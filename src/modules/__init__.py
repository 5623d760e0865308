"""게임 모듈 시스템 - 턴 드라이버와 장비 모듈"""

from src.modules.base import Action, GameContext, GameModule
from src.modules.module_manager import ModuleManager

__all__ = ["Action", "GameContext", "GameModule", "ModuleManager"]
