"""Shared fixtures."""

import logging

import pytest
import structlog

from password_kvstore.config import HashParameters
from password_kvstore.crypto import PasswordCipher


@pytest.fixture
def fast_hash() -> HashParameters:
    """Cheap Argon2 parameters so the suite runs quickly."""
    return HashParameters(memory_cost=64, time_cost=1, parallelism=1)


@pytest.fixture
def cipher(fast_hash: HashParameters) -> PasswordCipher:
    """A password cipher over the test password."""
    with PasswordCipher("password", 600, fast_hash) as tool:
        yield tool


@pytest.fixture
def reset_logging():
    """Restore logging configuration after a test reconfigures it."""
    yield
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    structlog.reset_defaults()
