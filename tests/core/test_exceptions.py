"""Tests for zakat_engine.core.exceptions."""

from zakat_engine.core.exceptions import (
    ConfigurationError,
    SnapshotError,
    UnknownMethodologyError,
    ZakatEngineError,
)


def test_hierarchy():
    """All exceptions should inherit from ZakatEngineError."""
    for exc_cls in [ConfigurationError, UnknownMethodologyError, SnapshotError]:
        assert issubclass(exc_cls, ZakatEngineError)


def test_unknown_methodology_is_configuration_error():
    assert issubclass(UnknownMethodologyError, ConfigurationError)


def test_unknown_methodology_message():
    err = UnknownMethodologyError("jafari", available=["shafii", "bradford"])
    assert err.methodology_id == "jafari"
    assert "'jafari'" in str(err)
    assert "Available: bradford, shafii" in str(err)


def test_unknown_methodology_without_available():
    err = UnknownMethodologyError("jafari")
    assert str(err) == "Unknown methodology: 'jafari'"


def test_catch_base():
    """Catching ZakatEngineError should catch all subtypes."""
    try:
        raise SnapshotError("calendar_type must be lunar or solar")
    except ZakatEngineError as e:
        assert "calendar_type" in str(e)
