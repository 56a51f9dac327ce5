import logging

import pytest

from brokkr.config import Settings
from brokkr.errors import ConfigError


def test_defaults():
    settings = Settings.from_env({})

    assert settings.backend == "python"
    assert settings.log_level == logging.WARNING
    assert settings.llvm_opt_level == 2


def test_from_env():
    settings = Settings.from_env(
        {"BROKKR_BACKEND": " LLVM ", "BROKKR_LOG_LEVEL": "debug", "BROKKR_LLVM_OPT_LEVEL": "0"}
    )

    assert settings == Settings(backend="llvm", log_level=logging.DEBUG, llvm_opt_level=0)


@pytest.mark.parametrize(
    "environ",
    [
        {"BROKKR_BACKEND": "cuda"},
        {"BROKKR_LOG_LEVEL": "chatty"},
        {"BROKKR_LLVM_OPT_LEVEL": "fast"},
        {"BROKKR_LLVM_OPT_LEVEL": "4"},
    ],
)
def test_invalid_values(environ):
    with pytest.raises(ConfigError):
        Settings.from_env(environ)
