"""로깅 설정 테스트"""

import logging

import pytest

from src.core.logging import NOISY_LOGGERS, get_logger, setup_logging


@pytest.fixture(autouse=True)
def _restore_levels():
    saved = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


class TestSetupLogging:
    def test_generator_loggers_quieted_by_default(self) -> None:
        setup_logging("debug")
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.INFO

    def test_verbose_generation_leaves_levels(self) -> None:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.NOTSET)
        setup_logging("DEBUG", verbose_generation=True)
        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.NOTSET

    def test_get_logger_is_named(self) -> None:
        assert get_logger("src.services.equipment_service").name == "src.services.equipment_service"
