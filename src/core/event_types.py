"""이벤트 유형 상수

페이로드에는 ID만 담는다 (객체 참조 금지).
"""


class EventTypes:
    """이벤트 유형 문자열 상수"""

    # === Loot ===
    LOOT_GENERATED = "loot_generated"

    # === Identification ===
    IDENTIFICATION_STARTED = "identification_started"
    IDENTIFICATION_PROGRESS = "identification_progress"
    IDENTIFICATION_CANCELLED = "identification_cancelled"
    EQUIPMENT_IDENTIFIED = "equipment_identified"

    # === Curse ===
    CURSE_BOUND = "curse_bound"
    CURSE_REMOVED = "curse_removed"

    # === Registry ===
    DEFINITION_RELOADED = "definition_reloaded"

    # engine
    TURN_PROCESSED = "turn_processed"
