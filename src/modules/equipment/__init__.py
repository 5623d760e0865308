from src.modules.equipment.module import EquipmentModule

__all__ = ["EquipmentModule"]
