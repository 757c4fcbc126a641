"""Tests for the acme log reader and index parsing."""

import pytest

from acmefmt.acme.events import AcmeLog, SaveEvent, parse_log_line, read_index


class TestParseLogLine:
    def test_put(self):
        event = parse_log_line("12 put /home/u/src/main.go\n")
        assert event == SaveEvent(12, "/home/u/src/main.go", "put")
        assert event.is_save

    def test_name_with_spaces(self):
        event = parse_log_line("3 put /tmp/my file.py")
        assert event.name == "/tmp/my file.py"

    def test_other_ops_are_not_saves(self):
        event = parse_log_line("4 focus /tmp/a.go")
        assert event.op == "focus"
        assert not event.is_save

    def test_put_without_name_is_not_a_save(self):
        event = parse_log_line("5 put ")
        assert event is not None
        assert not event.is_save

    def test_new_window_without_name(self):
        event = parse_log_line("6 new")
        assert event == SaveEvent(6, "", "new")

    @pytest.mark.parametrize("line", ["", "put", "x put /a"])
    def test_malformed(self, line):
        assert parse_log_line(line) is None


class TestAcmeLog:
    def test_iterates_events_and_skips_garbage(self, tmp_path):
        (tmp_path / "log").write_text(
            "1 new /tmp/a.go\n"
            "garbage\n"
            "\n"
            "1 put /tmp/a.go\n"
        )

        events = list(AcmeLog(str(tmp_path)))

        assert events == [
            SaveEvent(1, "/tmp/a.go", "new"),
            SaveEvent(1, "/tmp/a.go", "put"),
        ]

    def test_missing_log_raises(self, tmp_path):
        with pytest.raises(OSError):
            list(AcmeLog(str(tmp_path)))


class TestReadIndex:
    def test_maps_names_to_ids(self, tmp_path):
        (tmp_path / "index").write_text(
            "%11d %11d %11d %11d %11d %s\n" % (1, 40, 120, 0, 0, "/src/a.go Del Snarf | Look")
            + "%11d %11d %11d %11d %11d %s\n" % (7, 30, 0, 1, 0, "/src/ Del Snarf Get")
            + "short line\n"
        )

        assert read_index(str(tmp_path)) == {"/src/a.go": 1, "/src/": 7}
