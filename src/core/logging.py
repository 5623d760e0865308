"""로깅 설정 - 루트 로거 1회 구성 + 모듈별 로거"""

import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"

# 틱/추첨 단위 debug 로그가 많은 패키지
NOISY_LOGGERS = ("src.core.equipment.loot_generator", "src.core.equipment.modifier_generator")


def setup_logging(level: str = "INFO", verbose_generation: bool = False) -> None:
    """level은 대소문자 무관. verbose_generation=False면 생성기 로그는 INFO 이상만."""
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=resolved,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if not verbose_generation:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(resolved, logging.INFO))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
