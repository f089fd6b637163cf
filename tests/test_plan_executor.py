"""Tests for the plan executor."""

from pathlib import Path
import itertools
from unittest.mock import MagicMock, patch

import pytest

from album_sync.core.fetch.base import FetchError, Fetcher
from album_sync.core.filesystem.paths import InvalidTrackKeyError
from album_sync.core.sync.executor import (
    ExecutionResult,
    PlanExecutionError,
    PlanExecutor,
    StateWriteError,
)
from album_sync.core.sync.progress import ProgressPhase
from album_sync.core.sync.reconciler import plan_for_strategy
from album_sync.core.sync.strategy import Strategy, StrategyKind, StrategyResolver
from album_sync.models.manifest import Manifest


class FakeFetcher:
    """Fetcher writing the source identifier into the destination file."""

    def __init__(self, failing=(), raising=()):
        self.failing = set(failing)
        self.raising = set(raising)
        self.calls = []
        self.existed_before_fetch = {}

    def fetch(self, destination: Path, source_identifier: str) -> bool:
        self.calls.append((destination.name, source_identifier))
        self.existed_before_fetch[destination.name] = destination.exists()
        if source_identifier in self.raising:
            raise FetchError(f"cannot fetch {source_identifier}")
        if source_identifier in self.failing:
            return False
        destination.write_text(source_identifier, encoding="utf-8")
        return True


@pytest.fixture
def music_root(tmp_path):
    """Create a temporary root directory for album folders."""
    root = tmp_path / "Albums"
    root.mkdir()
    return root


@pytest.fixture
def fetcher():
    """Create a fetcher that always succeeds."""
    return FakeFetcher()


@pytest.fixture
def executor(music_root, fetcher):
    """Create a PlanExecutor instance."""
    return PlanExecutor(root=music_root, fetcher=fetcher)


def make_album(root, title, state_text, files):
    """Create an album folder with a state record and track files."""
    folder = root / title
    folder.mkdir()
    (folder / ".album").write_text(state_text, encoding="utf-8")
    for name, content in files.items():
        (folder / f"{name}.mp3").write_text(content, encoding="utf-8")
    return folder


class TestExecutionResult:
    """Test ExecutionResult dataclass."""

    def test_initialization(self):
        """Test ExecutionResult initialization with defaults."""
        result = ExecutionResult()
        assert result.deletions_attempted == 0
        assert result.files_removed == 0
        assert result.files_already_absent == 0
        assert result.downloads_attempted == 0
        assert result.downloads_successful == 0
        assert result.downloads_failed == 0
        assert result.failed_keys == []
        assert result.errors == []
        assert result.state_written is False
        assert result.dry_run is False
        assert result.succeeded is True

    def test_add_error(self, caplog):
        """Test adding error messages."""
        result = ExecutionResult()
        result.add_error("Test error")
        assert result.errors == ["Test error"]
        assert result.succeeded is False
        assert "Test error" in caplog.text

    def test_get_summary(self):
        """Test getting summary statistics."""
        result = ExecutionResult(
            deletions_attempted=2,
            files_removed=1,
            files_already_absent=1,
            downloads_attempted=3,
            downloads_successful=2,
            downloads_failed=1,
            errors=["error1"],
        )
        assert result.get_summary() == {
            "deletions_attempted": 2,
            "files_removed": 1,
            "files_already_absent": 1,
            "downloads_attempted": 3,
            "downloads_successful": 2,
            "downloads_failed": 1,
            "errors": 1,
        }


class TestPlanExecutorInit:
    """Test PlanExecutor initialization."""

    def test_init_with_defaults(self, music_root, fetcher):
        """Test initialization with default parameters."""
        executor = PlanExecutor(root=music_root, fetcher=fetcher)
        assert executor.root == music_root
        assert executor.fetcher is fetcher
        assert executor.media_extension == ".mp3"
        assert executor.state_filename == ".album"
        assert executor.dry_run is False

    def test_init_with_string_path(self, music_root, fetcher):
        """Test initialization with string path instead of Path object."""
        executor = PlanExecutor(root=str(music_root), fetcher=fetcher)
        assert executor.root == music_root
        assert isinstance(executor.root, Path)

    def test_fake_fetcher_matches_protocol(self, fetcher):
        """Test that the fake fetcher satisfies the Fetcher protocol."""
        assert isinstance(fetcher, Fetcher)


class TestNewAlbum:
    """Test executing plans for albums without a folder."""

    def test_new_album(self, executor, fetcher, music_root):
        """Test that a new album is created with every track fetched in order."""
        desired = Manifest.from_text("Blue", "Intro=id1\nTrack2=id2\n")

        result = executor.execute(desired, Strategy.new())

        folder = music_root / "Blue"
        assert folder.is_dir()
        assert fetcher.calls == [("Intro.mp3", "id1"), ("Track2.mp3", "id2")]
        assert (folder / "Intro.mp3").read_text(encoding="utf-8") == "id1"
        assert (folder / "Track2.mp3").read_text(encoding="utf-8") == "id2"
        assert (folder / ".album").read_text(encoding="utf-8") == (
            "Intro=id1\nTrack2=id2\n"
        )
        assert result.downloads_attempted == 2
        assert result.downloads_successful == 2
        assert result.deletions_attempted == 0
        assert result.state_written is True
        assert result.succeeded is True

    def test_new_strategy_over_existing_folder(self, executor, fetcher, music_root):
        """Test that NEW on an existing folder fetches everything again."""
        folder = music_root / "Blue"
        folder.mkdir()
        (folder / "Intro.mp3").write_text("stale", encoding="utf-8")
        desired = Manifest.from_text("Blue", "Intro=id1\n")

        executor.execute(desired, Strategy.new())

        assert (folder / "Intro.mp3").read_text(encoding="utf-8") == "id1"
        assert (folder / ".album").read_text(encoding="utf-8") == "Intro=id1\n"

    def test_empty_album(self, executor, fetcher, music_root):
        """Test that an empty manifest still creates the folder and record."""
        result = executor.execute(Manifest.empty("Blue"), Strategy.new())

        assert fetcher.calls == []
        assert (music_root / "Blue" / ".album").read_text(encoding="utf-8") == ""
        assert result.state_written is True


class TestRebuildAlbum:
    """Test executing plans against a recorded baseline."""

    def test_changed_and_added_tracks(self, executor, fetcher, music_root):
        """Test replacing a changed track and fetching a new one."""
        folder = make_album(
            music_root,
            "Blue",
            "Intro=id1\nTrack2=idOLD\n",
            {"Intro": "id1", "Track2": "idOLD"},
        )
        baseline = Manifest.from_text("Blue", "Intro=id1\nTrack2=idOLD\n")
        desired = Manifest.from_text("Blue", "Intro=id1\nTrack2=id2\nOutro=id3\n")

        result = executor.execute(desired, Strategy.rebuild(baseline))

        assert fetcher.calls == [("Track2.mp3", "id2"), ("Outro.mp3", "id3")]
        assert (folder / "Intro.mp3").read_text(encoding="utf-8") == "id1"
        assert (folder / "Track2.mp3").read_text(encoding="utf-8") == "id2"
        assert (folder / "Outro.mp3").read_text(encoding="utf-8") == "id3"
        assert (folder / ".album").read_text(encoding="utf-8") == desired.render()
        assert result.files_removed == 1
        assert result.downloads_successful == 2

    def test_deletions_happen_before_additions(self, executor, fetcher, music_root):
        """Test that a replaced track is gone before its new version is fetched."""
        make_album(music_root, "Blue", "Track2=idOLD\n", {"Track2": "idOLD"})
        baseline = Manifest.from_text("Blue", "Track2=idOLD\n")
        desired = Manifest.from_text("Blue", "Track2=id2\n")

        executor.execute(desired, Strategy.rebuild(baseline))

        assert fetcher.existed_before_fetch == {"Track2.mp3": False}

    def test_everything_removed(self, executor, fetcher, music_root):
        """Test that an emptied manifest removes every track."""
        folder = make_album(music_root, "Blue", "Solo=idX\n", {"Solo": "idX"})
        baseline = Manifest.from_text("Blue", "Solo=idX\n")

        result = executor.execute(Manifest.empty("Blue"), Strategy.rebuild(baseline))

        assert not (folder / "Solo.mp3").exists()
        assert fetcher.calls == []
        assert (folder / ".album").read_text(encoding="utf-8") == ""
        assert result.files_removed == 1

    def test_untracked_files_are_left_alone(self, executor, music_root):
        """Test that files unknown to the baseline are not deleted."""
        folder = make_album(
            music_root, "Blue", "Solo=idX\n", {"Solo": "idX", "Bonus": "mine"}
        )
        baseline = Manifest.from_text("Blue", "Solo=idX\n")

        executor.execute(Manifest.empty("Blue"), Strategy.rebuild(baseline))

        assert (folder / "Bonus.mp3").exists()

    def test_missing_deletion_target_is_ignored(self, executor, music_root):
        """Test that a track file already gone counts as removed."""
        folder = make_album(music_root, "Blue", "Solo=idX\n", {})
        baseline = Manifest.from_text("Blue", "Solo=idX\n")

        result = executor.execute(Manifest.empty("Blue"), Strategy.rebuild(baseline))

        assert result.files_already_absent == 1
        assert result.files_removed == 0
        assert result.succeeded is True
        assert (folder / ".album").read_text(encoding="utf-8") == ""

    def test_failed_deletion_aborts_before_commit(self, executor, fetcher, music_root):
        """Test that an undeletable track aborts the run and keeps the record."""
        folder = make_album(music_root, "Blue", "Solo=idX\n", {})
        # A directory in place of the track file cannot be unlinked
        (folder / "Solo.mp3").mkdir()
        baseline = Manifest.from_text("Blue", "Solo=idX\n")
        desired = Manifest.from_text("Blue", "Intro=id1\n")

        with pytest.raises(PlanExecutionError, match="Solo.mp3"):
            executor.execute(desired, Strategy.rebuild(baseline))

        assert fetcher.calls == []
        assert (folder / ".album").read_text(encoding="utf-8") == "Solo=idX\n"


class TestFetchFailures:
    """Test continue-on-error handling of failed fetches."""

    def test_failed_fetch_is_still_recorded(self, music_root):
        """Test that a failed track is recorded as present and reported."""
        fetcher = FakeFetcher(failing={"id2"})
        executor = PlanExecutor(root=music_root, fetcher=fetcher)
        desired = Manifest.from_text("Blue", "Intro=id1\nTrack2=id2\nOutro=id3\n")

        result = executor.execute(desired, Strategy.new())

        folder = music_root / "Blue"
        # The remaining additions still ran
        assert [call[1] for call in fetcher.calls] == ["id1", "id2", "id3"]
        assert not (folder / "Track2.mp3").exists()
        # The record claims the failed track anyway
        assert (folder / ".album").read_text(encoding="utf-8") == desired.render()
        assert result.failed_keys == ["Track2"]
        assert result.downloads_successful == 2
        assert result.downloads_failed == 1
        assert result.state_written is True
        assert result.succeeded is False

    def test_fetch_error_is_recovered(self, music_root):
        """Test that a FetchError counts as one failed addition."""
        fetcher = FakeFetcher(raising={"id1"})
        executor = PlanExecutor(root=music_root, fetcher=fetcher)
        desired = Manifest.from_text("Blue", "Intro=id1\nTrack2=id2\n")

        result = executor.execute(desired, Strategy.new())

        assert result.failed_keys == ["Intro"]
        assert result.downloads_successful == 1
        assert any("cannot fetch id1" in error for error in result.errors)

    def test_crash_keeps_previous_record(self, music_root):
        """Test that an unexpected crash mid-plan leaves the old record intact."""
        folder = make_album(music_root, "Blue", "Solo=idX\n", {"Solo": "idX"})
        fetcher = MagicMock()
        fetcher.fetch.side_effect = RuntimeError("interrupted")
        executor = PlanExecutor(root=music_root, fetcher=fetcher)
        baseline = Manifest.from_text("Blue", "Solo=idX\n")
        desired = Manifest.from_text("Blue", "Intro=id1\n")

        with pytest.raises(RuntimeError):
            executor.execute(desired, Strategy.rebuild(baseline))

        assert (folder / ".album").read_text(encoding="utf-8") == "Solo=idX\n"


class TestCommit:
    """Test writing the state record."""

    def test_state_write_failure(self, executor, music_root):
        """Test that an unwritable state record fails the run."""
        # A directory cannot be replaced by the rendered record
        (music_root / "Blue" / ".album").mkdir(parents=True)
        desired = Manifest.from_text("Blue", "Intro=id1\n")

        with pytest.raises(StateWriteError, match=".album"):
            executor.execute(desired, Strategy.new())

    def test_no_temporary_file_left(self, executor, music_root):
        """Test that the temporary record is replaced into place."""
        executor.execute(Manifest.from_text("Blue", "Intro=id1\n"), Strategy.new())
        assert sorted(p.name for p in (music_root / "Blue").iterdir()) == [
            ".album",
            "Intro.mp3",
        ]

    def test_custom_state_filename_and_extension(self, music_root, fetcher):
        """Test executing with another record name and media extension."""
        executor = PlanExecutor(
            root=music_root,
            fetcher=fetcher,
            media_extension=".opus",
            state_filename="state.txt",
        )
        executor.execute(Manifest.from_text("Blue", "Intro=id1\n"), Strategy.new())

        folder = music_root / "Blue"
        assert (folder / "Intro.opus").exists()
        assert (folder / "state.txt").read_text(encoding="utf-8") == "Intro=id1\n"


class TestIdempotence:
    """Test that replaying an unchanged manifest does nothing."""

    def test_rerun_yields_empty_plan(self, executor, fetcher, music_root):
        """Test that a second run against the new baseline is a no-op."""
        resolver = StrategyResolver(music_root)
        desired = Manifest.from_text("Blue", "Intro=id1\nTrack2=id2\n")

        executor.execute(desired, resolver.resolve(desired))
        assert len(fetcher.calls) == 2

        strategy = resolver.resolve(desired)
        assert strategy.kind == StrategyKind.REBUILD
        assert plan_for_strategy(desired, strategy).is_empty

        result = executor.execute(desired, strategy)
        assert len(fetcher.calls) == 2
        assert result.downloads_attempted == 0
        assert result.deletions_attempted == 0

    def test_manifest_change_then_rerun(self, executor, fetcher, music_root):
        """Test that an edited manifest converges and then stays put."""
        resolver = StrategyResolver(music_root)
        first = Manifest.from_text("Blue", "Intro=id1\nTrack2=idOLD\n")
        second = Manifest.from_text("Blue", "Intro=id1\nTrack2=id2\nOutro=id3\n")

        executor.execute(first, resolver.resolve(first))
        executor.execute(second, resolver.resolve(second))

        assert plan_for_strategy(second, resolver.resolve(second)).is_empty
        assert sorted(p.name for p in (music_root / "Blue").glob("*.mp3")) == [
            "Intro.mp3",
            "Outro.mp3",
            "Track2.mp3",
        ]


class TestDryRun:
    """Test dry-run execution."""

    def test_dry_run_changes_nothing(self, music_root, fetcher):
        """Test that a dry run touches neither the folder nor the fetcher."""
        executor = PlanExecutor(root=music_root, fetcher=fetcher, dry_run=True)
        desired = Manifest.from_text("Blue", "Intro=id1\nTrack2=id2\n")

        result = executor.execute(desired, Strategy.new())

        assert not (music_root / "Blue").exists()
        assert fetcher.calls == []
        assert result.dry_run is True
        assert result.downloads_attempted == 2
        assert result.state_written is False

    def test_dry_run_keeps_stale_tracks(self, music_root, fetcher):
        """Test that a dry run reports deletions without deleting."""
        folder = make_album(music_root, "Blue", "Solo=idX\n", {"Solo": "idX"})
        executor = PlanExecutor(root=music_root, fetcher=fetcher, dry_run=True)
        baseline = Manifest.from_text("Blue", "Solo=idX\n")

        result = executor.execute(Manifest.empty("Blue"), Strategy.rebuild(baseline))

        assert (folder / "Solo.mp3").exists()
        assert result.deletions_attempted == 1
        assert (folder / ".album").read_text(encoding="utf-8") == "Solo=idX\n"


class TestValidation:
    """Test rejection of unusable track names."""

    def test_invalid_addition_key(self, executor, fetcher, music_root):
        """Test that an unusable track name aborts before any effect."""
        desired = Manifest.from_text("Blue", "Intro=id1\nAC/DC=id2\n")

        with pytest.raises(InvalidTrackKeyError):
            executor.execute(desired, Strategy.new())

        assert not (music_root / "Blue").exists()
        assert fetcher.calls == []

    def test_unusable_recorded_name_rebuilds_from_scratch(
        self, executor, fetcher, music_root
    ):
        """Test that a record naming an unusable track no longer blocks the album."""
        folder = make_album(
            music_root, "Blue", "=junk\n../escape=id0\nIntro=id1\n", {"Intro": "old"}
        )
        desired = Manifest.from_text("Blue", "Intro=id1\n")

        strategy = StrategyResolver(music_root).resolve(desired)
        assert strategy.kind == StrategyKind.NEW

        result = executor.execute(desired, strategy)

        assert result.succeeded is True
        assert fetcher.calls == [("Intro.mp3", "id1")]
        assert (folder / "Intro.mp3").read_text(encoding="utf-8") == "id1"
        assert (folder / ".album").read_text(encoding="utf-8") == "Intro=id1\n"
        assert not (music_root / "escape.mp3").exists()


class TestProgress:
    """Test progress reporting during execution."""

    def test_phases_are_reported_in_order(self, music_root, fetcher):
        """Test that planning, deletions, fetches and commit arrive in order."""
        updates = []
        executor = PlanExecutor(
            root=music_root, fetcher=fetcher, progress_callback=updates.append
        )
        make_album(music_root, "Blue", "Solo=idX\n", {"Solo": "idX"})
        baseline = Manifest.from_text("Blue", "Solo=idX\n")
        desired = Manifest.from_text("Blue", "Intro=id1\n")

        executor.execute(desired, Strategy.rebuild(baseline))

        phases = []
        for update in updates:
            if not phases or phases[-1] != update.phase:
                phases.append(update.phase)
        assert phases == [
            ProgressPhase.RESOLVING,
            ProgressPhase.DELETING,
            ProgressPhase.FETCHING,
            ProgressPhase.COMMITTING,
            ProgressPhase.COMPLETE,
        ]
        fetched = [u for u in updates if "fetched" in u.metadata]
        assert [u.metadata["key"] for u in fetched] == ["Intro"]
        assert fetched[0].metadata["fetched"] is True

    def test_elapsed_time_restarts_for_each_run(self, music_root, fetcher):
        """Test that a reused executor measures every run from its own start."""
        updates = []
        executor = PlanExecutor(
            root=music_root, fetcher=fetcher, progress_callback=updates.append
        )
        desired = Manifest.from_text("Blue", "Intro=id1\n")

        clock = MagicMock(side_effect=itertools.count(0, 10))
        with patch("album_sync.core.sync.progress.time.monotonic", clock):
            executor.execute(desired, Strategy.new())
            first_run = len(updates)
            executor.execute(desired, Strategy.new())

        first, second = updates[0], updates[first_run]
        assert first.phase == second.phase == ProgressPhase.RESOLVING
        assert "Blue" in second.message
        assert first.elapsed_time == second.elapsed_time == 10
