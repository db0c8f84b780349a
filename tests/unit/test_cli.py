"""Unit tests for the callboard command-line entry."""

import json

import pytest
from icalendar import Calendar

from callboard.__main__ import main

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every CLI test in an empty directory so no .env file is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def write_json(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestValidateAgenda:
    def test_valid_window(self, capsys):
        assert main(["validate-agenda", "19:00", "22:00", "19:30", "20:15"]) == 0
        assert capsys.readouterr().out.strip() == "OK"

    def test_out_of_bounds_window(self, capsys):
        assert main(["validate-agenda", "19:00", "22:00", "18:30", "20:00"]) == 1
        assert "Start time 18:30 must be between 19:00 and 22:00" in capsys.readouterr().err

    def test_missing_candidate(self, capsys):
        assert main(["validate-agenda", "19:00", "22:00"]) == 2

    def test_suggest_uses_configured_step(self, capsys, monkeypatch):
        monkeypatch.setenv("CALLBOARD_QUICK_SELECT_STEP", "60")
        assert main(["validate-agenda", "19:00", "21:00", "--suggest"]) == 0
        assert capsys.readouterr().out.split() == ["19:00", "20:00", "21:00"]


class TestLocationCommand:
    def test_prints_parsed_locations(self, capsys):
        assert main(["location", "123 Main St, Springfield, IL 62701", "Online"]) == 0
        parsed = json.loads(capsys.readouterr().out)

        assert parsed[0]["city"] == "Springfield"
        assert parsed[0]["state"] == "IL"
        assert parsed[1]["city"] is None


class TestIcsCommand:
    def test_event_list(self, isolated_cwd):
        source = write_json(
            isolated_cwd / "events.json",
            [
                {"title": "Hamlet - Rehearsal", "start": "2024-06-01T00:00:00", "all_day": True},
                {"title": "Hamlet - Tech", "start": "2024-06-10T18:00:00Z", "end": "2024-06-10T22:00:00Z"},
            ],
        )

        assert main(["ics", str(source), "--name", "Hamlet Rehearsals"]) == 0

        output = isolated_cwd / "Hamlet_Rehearsals_calendar.ics"
        calendar = Calendar.from_ical(output.read_bytes())
        assert str(calendar["X-WR-CALNAME"]) == "Hamlet Rehearsals"
        assert len(calendar.walk("VEVENT")) == 2

    def test_audition_payload(self, isolated_cwd, hamlet_audition, hamlet_slot):
        source = write_json(isolated_cwd / "audition.json", {"audition": hamlet_audition, "slots": [hamlet_slot]})
        output = isolated_cwd / "out.ics"

        assert main(["ics", str(source), "-o", str(output)]) == 0
        assert output.read_text(encoding="utf-8").count("BEGIN:VEVENT") == 5

    def test_empty_event_list_fails(self, isolated_cwd, capsys):
        source = write_json(isolated_cwd / "events.json", [])
        assert main(["ics", str(source)]) == 1
        assert "No events to export" in capsys.readouterr().err

    def test_unreadable_input(self, isolated_cwd, capsys):
        assert main(["ics", str(isolated_cwd / "missing.json")]) == 1
        assert "Unable to read" in capsys.readouterr().err


class TestPdfCommand:
    def test_calendar(self, isolated_cwd):
        source = write_json(
            isolated_cwd / "calendar.json",
            {
                "show": {"title": "Hamlet", "author": "William Shakespeare"},
                "actor_name": "Jamie Doe",
                "events": [{"title": "Hamlet - Rehearsal", "start": "2024-06-01T00:00:00", "all_day": True}],
            },
        )

        assert main(["pdf", str(source)]) == 0
        assert (isolated_cwd / "Hamlet_calendar.pdf").read_bytes().startswith(b"%PDF")

    def test_resume_with_text_watermark(self, isolated_cwd):
        source = write_json(
            isolated_cwd / "resume.json",
            {
                "profile": {"first_name": "Jamie", "last_name": "Doe"},
                "casting_history": [{"show_name": "Hamlet", "role": "Ophelia"}],
                "watermark": {"text": "DRAFT"},
            },
        )

        assert main(["pdf", str(source), "--kind", "resume"]) == 0
        assert (isolated_cwd / "Jamie_Doe_Resume.pdf").read_bytes().startswith(b"%PDF")


class TestConflictsCommand:
    def setup_method(self):
        self.events = [
            {"id": "a", "title": "Dinner", "start": "2024-06-01T18:00:00", "end": "2024-06-01T20:00:00"},
            {"id": "b", "title": "Work", "start": "2024-06-01T19:00:00", "end": "2024-06-01T21:00:00"},
        ]

    def test_plain_text(self, isolated_cwd, capsys):
        source = write_json(isolated_cwd / "busy.json", self.events)

        assert main(["conflicts", str(source), "--user", "Jamie Doe", "--hide-names"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("Jamie Doe — Conflicts")
        assert "- Busy from 6:00 PM to 8:00 PM (conflict)" in out

    def test_csv_to_file(self, isolated_cwd):
        source = write_json(isolated_cwd / "busy.json", self.events)
        output = isolated_cwd / "conflicts.csv"

        assert main(["conflicts", str(source), "--csv", "-o", str(output)]) == 0
        lines = output.read_text(encoding="utf-8").split("\n")
        assert lines[1] == "06/01/2024,6:00 PM,8:00 PM,Dinner,personal_event,1"


class TestGlobalOptions:
    def test_bad_config_file(self, isolated_cwd, capsys):
        assert main(["--config", str(isolated_cwd / "missing.yaml"), "location", "Chicago, IL"]) == 2
        assert "error:" in capsys.readouterr().err

    def test_invalid_record_reports_error(self, isolated_cwd, capsys):
        source = write_json(isolated_cwd / "events.json", [{"title": "No start"}])
        assert main(["ics", str(source)]) == 1
        assert "error:" in capsys.readouterr().err
