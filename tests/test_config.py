from __future__ import annotations

import pytest
from pydantic import ValidationError

from chessrules.config import Settings, load_settings


def test_defaults() -> None:
    s = load_settings({})
    assert s == Settings()
    assert s.port == 8000
    assert s.log_level == "INFO"
    assert s.max_perft_depth == 5


def test_environment_overrides() -> None:
    s = load_settings(
        {
            "CHESSRULES_HOST": "127.0.0.1",
            "CHESSRULES_PORT": "9000",
            "CHESSRULES_LOG_LEVEL": "debug",
            "CHESSRULES_MAX_PERFT_DEPTH": "3",
            "UNRELATED": "x",
        }
    )
    assert (s.host, s.port, s.log_level, s.max_perft_depth) == ("127.0.0.1", 9000, "DEBUG", 3)


@pytest.mark.parametrize(
    "env",
    [
        {"CHESSRULES_PORT": "0"},
        {"CHESSRULES_PORT": "http"},
        {"CHESSRULES_LOG_LEVEL": "chatty"},
        {"CHESSRULES_MAX_PERFT_DEPTH": "-1"},
    ],
)
def test_invalid_values_rejected(env) -> None:
    with pytest.raises(ValidationError):
        load_settings(env)
