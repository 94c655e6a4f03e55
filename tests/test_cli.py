"""
Tests for the command line entry point
"""
import io

from event_parser.__main__ import main


REFERENCE = ["--reference", "2021-06-10T09:00:00"]


class TestCli:
    """Test argument handling and output modes"""

    def test_pretty_output(self, capsys):
        """Default output is the human readable form"""
        assert main(REFERENCE + ["Dinner", "at", "7"]) == 0
        out = capsys.readouterr().out
        assert 'Event: "Dinner"' in out
        assert "07:00pm June 10 2021 - 08:00pm June 10 2021" in out

    def test_ics_output(self, capsys):
        """--ics prints a calendar"""
        assert main(REFERENCE + ["--ics", "Lunch at 12pm on 6/15"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("BEGIN:VCALENDAR\r\n")
        assert "DTSTART:20210615T120000\r\n" in out
        assert "SUMMARY:Lunch\r\n" in out

    def test_todo_output(self, capsys):
        """--todo switches to VTODO components"""
        assert main(REFERENCE + ["--ics", "--todo", "Taxes by 4/15"]) == 0
        out = capsys.readouterr().out
        assert "BEGIN:VTODO\r\n" in out
        assert "DUE;VALUE=DATE:20210415\r\n" in out

    def test_stdin_lines(self, capsys, monkeypatch):
        """Without arguments every non-blank stdin line is an event"""
        monkeypatch.setattr("sys.stdin", io.StringIO("Lunch at noon\n\nDinner at 7\n"))
        assert main(REFERENCE + ["--ics"]) == 0
        assert capsys.readouterr().out.count("BEGIN:VEVENT") == 2

    def test_empty_stdin(self, monkeypatch):
        """Nothing to parse is a failure exit"""
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        assert main(REFERENCE) == 1

    def test_missing_config(self, tmp_path):
        """An unreadable config file is reported, not raised"""
        assert main(["--config", str(tmp_path / "missing.yaml"), "Dinner at 7"]) == 2

    def test_config_file(self, tmp_path, capsys):
        """The config file changes the default duration"""
        path = tmp_path / "config.yaml"
        path.write_text("parser:\n  default_duration_minutes: 15\n")
        assert main(REFERENCE + ["--config", str(path), "Dinner at 7"]) == 0
        assert "07:15pm" in capsys.readouterr().out
