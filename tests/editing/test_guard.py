"""Tests for the snapshot guard."""

import pytest

from acmefmt.editing.guard import StaleBufferError, check_snapshot, guard


def test_identical_buffers_pass():
    assert guard(b"a\nb\n", b"a\nb\n") is True


def test_any_difference_fails():
    assert guard(b"a\nb\n", b"a\nb") is False
    assert guard(b"a\n", b"A\n") is False


def test_check_snapshot_raises_with_sizes():
    with pytest.raises(StaleBufferError) as exc_info:
        check_snapshot(b"abc", b"abcd", "x.go")
    message = str(exc_info.value)
    assert "window modified since put" in message
    assert "x.go" in message
    assert "3 bytes" in message and "4 bytes" in message


def test_check_snapshot_passes_silently():
    check_snapshot(b"same", b"same")
