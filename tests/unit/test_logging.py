"""Unit tests for femtologging integration helpers.

Run with:
    pytest tests/unit/test_logging.py
"""

from __future__ import annotations

import pytest

from clawarden.logging import (
    configure_logging,
    log_debug,
    log_error,
    log_exception,
    log_info,
    log_warning,
    normalize_log_level,
)


class _FakeLogger:
    """Collects log calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message


@pytest.mark.parametrize(
    ("input_level", "expected_level", "expected_invalid"),
    [
        ("warning", "WARNING", False),
        (" warn ", "WARN", False),
        ("trace", "TRACE", False),
        (None, "INFO", True),
        ("", "INFO", True),
        ("verbose", "INFO", True),
    ],
)
def test_normalize_log_level(
    input_level: str | None, expected_level: str, expected_invalid: bool
) -> None:
    """Normalize log levels and flag invalid inputs."""
    assert normalize_log_level(input_level) == (expected_level, expected_invalid)


def test_log_info_formats_and_passes_level() -> None:
    """log_info interpolates arguments and emits INFO."""
    logger = _FakeLogger()

    log_info(logger, "Reconciling %s in %s", "octocat", "acme")

    assert logger.calls == [("INFO", "Reconciling octocat in acme", None, False)]


def test_template_without_args_is_not_interpolated() -> None:
    """A bare template containing a percent sign is passed through unchanged."""
    logger = _FakeLogger()

    log_debug(logger, "100% cached")

    assert logger.calls == [("DEBUG", "100% cached", None, False)]


def test_log_warning_forwards_exc_info() -> None:
    """log_warning forwards exc_info to the logger."""
    logger = _FakeLogger()
    exc = ValueError("boom")

    log_warning(logger, "warning: %s", "oops", exc_info=exc)

    assert logger.calls == [("WARNING", "warning: oops", exc, False)]


def test_log_error_defaults_stack_info_false() -> None:
    """log_error defaults stack_info to False."""
    logger = _FakeLogger()

    log_error(logger, "error: %s", "oops")

    assert logger.calls == [("ERROR", "error: oops", None, False)]


def test_log_exception_passes_exc_info() -> None:
    """log_exception forwards the exception payload to the logger."""
    logger = _FakeLogger()
    exc = ValueError("boom")

    log_exception(logger, "failed", exc)

    assert logger.calls == [("ERROR", "failed", exc, False)]


@pytest.mark.parametrize(
    ("input_level", "expected_normalized", "expected_invalid"),
    [("DEBUG", "DEBUG", False), ("nope", "INFO", True)],
)
def test_configure_logging(
    monkeypatch: pytest.MonkeyPatch,
    input_level: str,
    expected_normalized: str,
    expected_invalid: bool,
) -> None:
    """configure_logging normalizes input levels and flags invalid values."""
    captured: dict[str, object] = {}

    def fake_basic_config(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr("clawarden.logging.basicConfig", fake_basic_config)

    normalized, invalid = configure_logging(input_level)

    assert (normalized, invalid) == (expected_normalized, expected_invalid)
    assert captured == {"level": expected_normalized, "force": False}
