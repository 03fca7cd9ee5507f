import pytest

from utf8_engine.buffer import Utf8Buffer
from utf8_engine.runtime.settings import DEFAULT_WINDOW_CAPACITY, window_capacity


def test_default_window_capacity(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("UTF8_ENGINE_WINDOW_SIZE", raising=False)

    assert window_capacity() == DEFAULT_WINDOW_CAPACITY == 64


def test_window_capacity_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UTF8_ENGINE_WINDOW_SIZE", "3")

    assert window_capacity() == 3
    assert Utf8Buffer.from_text("abcdef").begin().capacity == 3


def test_override_beats_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UTF8_ENGINE_WINDOW_SIZE", "3")

    assert window_capacity(5) == 5


@pytest.mark.parametrize("raw", ["0", "-4", "many"])
def test_invalid_environment_value(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("UTF8_ENGINE_WINDOW_SIZE", raw)

    with pytest.raises(ValueError):
        window_capacity()


def test_invalid_override() -> None:
    with pytest.raises(ValueError):
        window_capacity(0)
