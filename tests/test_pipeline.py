"""Tests for import run orchestration, extract reading and the importer CLI."""

import tempfile
from datetime import datetime
from pathlib import Path

import pytest
import requests

from ufc_ingest.importer import DataStorage, ImportPipeline
from ufc_ingest.importer.cli import main
from ufc_ingest.importer.client import ExtractClient
from ufc_ingest.importer.errors import StructuralError
from ufc_ingest.importer.models import EVENTS, FIGHT_STATS, FIGHTERS

NOW = datetime(2025, 1, 18, 12, 0, 0)

FIGHTERS_CSV = '''url,name,nickname,wins,losses,draws,height,weight,reach,stance,dob,slpm,striking_accuracy,sapm,striking_defense,takedown_avg,takedown_accuracy,takedown_defense,submission_avg,scraped_date
http://ufcstats.com/fighter-details/a1,Islam Makhachev,,26,1,0,"5' 10""",155 lbs.,"70""",Southpaw,"Oct 27, 1991",2.44,59%,0.98,63%,3.20,60%,90%,1.0,2025-01-10
http://ufcstats.com/fighter-details/b2,Renato Moicano,Money,20,5,1,"5' 11""",155 lbs.,--,Orthodox,--,4.10,50%,3.50,55%,1.20,35%,55%,1.5,2025-01-10
http://ufcstats.com/fighter-details/c3,Broken Row,only,three
'''

EVENTS_CSV = '''url,event_id,event_name,date,location
http://ufcstats.com/event-details/e311,e311,UFC 311: Makhachev vs. Moicano,"January 18, 2025","Inglewood, California, USA"
http://ufcstats.com/event-details/e400,e400,UFC 400,"December 12, 2026","Las Vegas, Nevada, USA"
'''

FIGHTSTATS_CSV = '''fight_id,fighter_name,fighter_position,knockdowns,sig_strikes,sig_strikes_pct,total_strikes,takedowns,takedown_pct,submission_attempts,reversals,control_time,sig_strikes_head,sig_strikes_body,sig_strikes_leg,sig_strikes_distance,sig_strikes_clinch,sig_strikes_ground
e311_1,Renato Moicano,2,0,3 of 5,60%,5 of 8,0 of 0,---,0,0,0:00,1 of 3,1 of 1,1 of 1,3 of 5,0 of 0,0 of 0
e311_1,Islam Makhachev,1,0,3 of 6,50%,10 of 14,1 of 1,100%,1,0,2:14,2 of 5,1 of 1,0 of 0,2 of 4,0 of 0,1 of 2
e311_2,Jiri Prochazka,1,1,---,---,---,---,---,0,0,--,---,---,---,---,---,---
'''


def write_extracts(directory: Path, **overrides) -> Path:
    files = {
        "fighters.csv": FIGHTERS_CSV,
        "events.csv": EVENTS_CSV,
        "fightstats.csv": FIGHTSTATS_CSV,
    }
    files.update(overrides)
    for name, content in files.items():
        if content is not None:
            (directory / name).write_text(content)
    return directory


@pytest.fixture
def workspace():
    """Temporary store and extracts directories."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        extracts = root / "extracts"
        extracts.mkdir()
        yield DataStorage(root / "data"), extracts


class StubResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code
        self.encoding = "utf-8"

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class StubSession:
    """Stands in for requests.Session."""

    def __init__(self, responses=None, error=None):
        self.headers = {}
        self.responses = responses or {}
        self.error = error
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        if self.error:
            raise self.error
        return self.responses.get(url, StubResponse("", status_code=404))


class TestImportPipeline:
    """Test full and partial import runs."""

    def test_full_run(self, workspace):
        storage, extracts = workspace
        write_extracts(extracts)

        result = ImportPipeline(storage, extracts_dir=extracts).run(now=NOW)

        assert [s.kind for s in result.stages] == [FIGHTERS, EVENTS, FIGHT_STATS]
        fighters = result.get(FIGHTERS)
        assert fighters.imported_count == 2
        assert fighters.error_count == 1
        assert fighters.malformed_count == 1
        assert result.get(EVENTS).imported_count == 2
        assert result.get(FIGHT_STATS).imported_count == 3

        moicano = storage.get(FIGHTERS, {"url": "http://ufcstats.com/fighter-details/b2"})
        assert moicano["reach"] is None
        assert moicano["dob"] is None
        makhachev = storage.get(FIGHTERS, {"url": "http://ufcstats.com/fighter-details/a1"})
        assert makhachev["height"] == "5' 10"
        assert makhachev["reach"] == 70.0
        assert makhachev["dob"] == "1991-10-27"

        assert storage.get(EVENTS, {"event_id": "e311"})["status"] == "completed"
        assert storage.get(EVENTS, {"event_id": "e400"})["status"] == "upcoming"
        assert storage.get(EVENTS, {"event_id": "e311"})["location"] == "Inglewood, California, USA"

        prochazka = storage.get(
            FIGHT_STATS, {"fight_id": "e311_2", "fighter_name": "Jiri Prochazka"}
        )
        assert prochazka["sig_strikes"] == {"landed": 0, "attempted": 0}
        assert prochazka["sig_strikes_pct"] == 0
        assert prochazka["control_time"] == "--"

    def test_rerun_is_idempotent(self, workspace):
        storage, extracts = workspace
        write_extracts(extracts)
        pipeline = ImportPipeline(storage, extracts_dir=extracts)

        pipeline.run(now=NOW)
        snapshot = {
            kind: storage.find_by_filter(kind, sort=[(k, 1) for k in keys])
            for kind, keys in [
                (FIGHTERS, ["url"]),
                (EVENTS, ["event_id"]),
                (FIGHT_STATS, ["fight_id", "fighter_name"]),
            ]
        }
        pipeline.run(now=NOW)

        assert storage.get_stats() == {FIGHTERS: 2, EVENTS: 2, FIGHT_STATS: 3}
        assert storage.find_by_filter(FIGHTERS, sort=[("url", 1)]) == snapshot[FIGHTERS]
        assert storage.find_by_filter(EVENTS, sort=[("event_id", 1)]) == snapshot[EVENTS]
        assert (
            storage.find_by_filter(FIGHT_STATS, sort=[("fight_id", 1), ("fighter_name", 1)])
            == snapshot[FIGHT_STATS]
        )

    def test_missing_extract_does_not_abort_other_stages(self, workspace):
        storage, extracts = workspace
        write_extracts(extracts, **{"events.csv": None})

        result = ImportPipeline(storage, extracts_dir=extracts).run(now=NOW)

        assert result.get(EVENTS).failed
        assert "not found" in result.get(EVENTS).failure
        assert result.get(FIGHTERS).imported_count == 2
        assert result.get(FIGHT_STATS).imported_count == 3

    def test_headerless_extract_fails_stage(self, workspace):
        storage, extracts = workspace
        write_extracts(extracts, **{"fighters.csv": "\n\n"})

        result = ImportPipeline(storage, extracts_dir=extracts).run(now=NOW)
        assert result.get(FIGHTERS).failed
        assert not result.get(EVENTS).failed

    def test_partial_rerun(self, workspace):
        storage, extracts = workspace
        write_extracts(extracts)

        result = ImportPipeline(storage, extracts_dir=extracts).run(only=["fightstats"], now=NOW)

        assert [s.kind for s in result.stages] == [FIGHT_STATS]
        assert storage.get_stats() == {FIGHTERS: 0, EVENTS: 0, FIGHT_STATS: 3}

    def test_unknown_stage(self, workspace):
        storage, extracts = workspace
        with pytest.raises(ValueError):
            ImportPipeline(storage, extracts_dir=extracts).run(only=["users"])

    def test_clear_stage_runs_first(self, workspace):
        storage, extracts = workspace
        write_extracts(extracts)
        storage.upsert_by_key(FIGHTERS, {"url": "stale"}, {"name": "Stale"})

        pipeline = ImportPipeline(storage, extracts_dir=extracts, clear=True)
        result = pipeline.run(now=NOW)

        assert pipeline.stages == ["clear", "fighters", "events", "fightstats"]
        assert result.stages[0].kind == "clear"
        assert result.stages[0].imported_count == 1
        assert not storage.exists(FIGHTERS, {"url": "stale"})
        assert storage.count(FIGHTERS) == 2

    def test_without_clear_existing_records_are_kept(self, workspace):
        storage, extracts = workspace
        write_extracts(extracts)
        storage.upsert_by_key(FIGHTERS, {"url": "stale"}, {"name": "Stale"})

        ImportPipeline(storage, extracts_dir=extracts).run(now=NOW)
        assert storage.exists(FIGHTERS, {"url": "stale"})

    def test_source_override(self, workspace):
        storage, extracts = workspace
        other = extracts / "other.csv"
        other.write_text(EVENTS_CSV)

        pipeline = ImportPipeline(storage, extracts_dir=extracts, sources={"events": other})
        result = pipeline.run(only=["events"], now=NOW)
        assert result.get(EVENTS).imported_count == 2


class TestExtractClient:
    """Test reading extracts from disk and HTTP."""

    def test_read_local_file(self, workspace):
        _, extracts = workspace
        path = extracts / "events.csv"
        path.write_text(EVENTS_CSV, encoding="utf-8-sig")
        assert ExtractClient(session=StubSession()).read(path) == EVENTS_CSV

    def test_missing_local_file(self, workspace):
        _, extracts = workspace
        with pytest.raises(StructuralError):
            ExtractClient(session=StubSession()).read(extracts / "missing.csv")

    def test_fetch_remote(self):
        url = "https://example.com/events.csv"
        session = StubSession(responses={url: StubResponse(EVENTS_CSV)})
        client = ExtractClient(session=session)

        assert client.read(url) == EVENTS_CSV
        assert session.requested == [url]
        assert "User-Agent" in session.headers

    def test_remote_errors_are_structural(self):
        client = ExtractClient(session=StubSession())
        with pytest.raises(StructuralError):
            client.read("http://example.com/missing.csv")

        client = ExtractClient(session=StubSession(error=requests.ConnectionError("refused")))
        with pytest.raises(StructuralError):
            client.read("http://example.com/events.csv")

    def test_pipeline_with_remote_source(self, workspace):
        storage, extracts = workspace
        url = "http://example.com/fightstats.csv"
        client = ExtractClient(session=StubSession(responses={url: StubResponse(FIGHTSTATS_CSV)}))

        pipeline = ImportPipeline(
            storage, extracts_dir=extracts, sources={"fightstats": url}, client=client
        )
        result = pipeline.run(only=["fightstats"], now=NOW)
        assert result.get(FIGHT_STATS).imported_count == 3


class TestCli:
    """Test the importer command line."""

    def test_run_and_stats(self, workspace, capsys):
        storage, extracts = workspace
        write_extracts(extracts)

        code = main(["run", "--data-dir", str(storage.data_dir), "--extracts-dir", str(extracts)])
        assert code == 0
        out = capsys.readouterr().out
        assert "fighters" in out
        assert "imported=2 errors=1" in out

        code = main(["stats", "--data-dir", str(storage.data_dir)])
        assert code == 0
        assert "fight_stats:" in capsys.readouterr().out

    def test_row_and_extract_errors_keep_zero_exit(self, workspace, capsys):
        storage, extracts = workspace
        code = main(["run", "--data-dir", str(storage.data_dir), "--extracts-dir", str(extracts)])
        assert code == 0
        assert "FAILED" in capsys.readouterr().out

    def test_unreachable_store_exits_non_zero(self, workspace, capsys):
        _, extracts = workspace
        blocker = extracts / "blocker"
        blocker.write_text("file")

        code = main(["run", "--data-dir", str(blocker / "data")])
        assert code == 1
        assert "Import failed" in capsys.readouterr().err

    def test_stage_option(self, workspace):
        storage, extracts = workspace
        write_extracts(extracts)

        main([
            "run",
            "--data-dir", str(storage.data_dir),
            "--extracts-dir", str(extracts),
            "--stage", "events",
        ])
        assert storage.get_stats() == {FIGHTERS: 0, EVENTS: 2, FIGHT_STATS: 0}
