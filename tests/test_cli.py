"""Tests for cli.py -- Click CLI interface."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from audio_library_cleanup.cli import main
from audio_library_cleanup.errors import ScanRootError
from audio_library_cleanup.models import TASK_ORDER, CleanupTask, RunSummary


@pytest.fixture(autouse=True)
def _use_tmp_dirs(tmp_path, monkeypatch, clean_env):
    """Point log and results output at tmp_path."""
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("RESULTS_DIR", str(tmp_path / "output"))


@pytest.fixture
def mock_runner_cls(tmp_path):
    with patch("audio_library_cleanup.cli.CleanupRunner") as runner_cls:
        runner_cls.return_value.run.return_value = RunSummary(root=tmp_path)
        yield runner_cls


def _run_args(mock_runner_cls):
    return mock_runner_cls.return_value.run.call_args.args


class TestHelpOutput:
    def test_help_flag(self):
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Clean up an audio library" in result.output
        for command in ("all", "duplicates", "formats", "directories", "empty-dirs"):
            assert command in result.output

    def test_all_help_lists_skip_flags(self):
        result = CliRunner().invoke(main, ["all", "--help"])
        assert result.exit_code == 0
        for flag in (
            "--dry-run",
            "--skip-duplicates",
            "--skip-mp3-flac",
            "--skip-directories",
            "--skip-empty-dirs",
            "--skip-config",
        ):
            assert flag in result.output


class TestTaskSelection:
    def test_all_runs_every_task(self, mock_runner_cls, tmp_path):
        result = CliRunner().invoke(main, ["all", str(tmp_path)])
        assert result.exit_code == 0, result.output + str(result.exception or "")
        root, tasks = _run_args(mock_runner_cls)
        assert root == tmp_path
        assert tasks == TASK_ORDER

    def test_skip_flags(self, mock_runner_cls, tmp_path):
        result = CliRunner().invoke(
            main, ["all", str(tmp_path), "--skip-duplicates", "--skip-mp3-flac"]
        )
        assert result.exit_code == 0, result.output + str(result.exception or "")
        _, tasks = _run_args(mock_runner_cls)
        assert tasks == [CleanupTask.DIRECTORIES, CleanupTask.EMPTY_DIRS]

    def test_everything_skipped(self, mock_runner_cls, tmp_path):
        result = CliRunner().invoke(
            main,
            [
                "all",
                str(tmp_path),
                "--skip-duplicates",
                "--skip-formats",
                "--skip-directories",
                "--skip-empty-dirs",
            ],
        )
        assert result.exit_code == 0
        assert "nothing to do" in result.output
        mock_runner_cls.assert_not_called()

    @pytest.mark.parametrize(
        "command,task",
        [
            ("duplicates", CleanupTask.DUPLICATES),
            ("formats", CleanupTask.FORMATS),
            ("directories", CleanupTask.DIRECTORIES),
            ("empty-dirs", CleanupTask.EMPTY_DIRS),
        ],
    )
    def test_single_task_commands(self, mock_runner_cls, tmp_path, command, task):
        result = CliRunner().invoke(main, [command, str(tmp_path)])
        assert result.exit_code == 0, result.output + str(result.exception or "")
        _, tasks = _run_args(mock_runner_cls)
        assert tasks == [task]


class TestConfigPassing:
    def test_dry_run_flag(self, mock_runner_cls, tmp_path):
        result = CliRunner().invoke(main, ["duplicates", str(tmp_path), "--dry-run"])
        assert result.exit_code == 0
        config = mock_runner_cls.call_args.kwargs["config"]
        assert config.dry_run is True

    def test_verbose_sets_debug(self, mock_runner_cls, tmp_path):
        result = CliRunner().invoke(main, ["-v", "formats", str(tmp_path)])
        assert result.exit_code == 0
        config = mock_runner_cls.call_args.kwargs["config"]
        assert config.verbose is True
        assert config.log_level == "DEBUG"

    def test_skip_config(self, mock_runner_cls, tmp_path):
        skip_file = tmp_path / "skip.json"
        skip_file.write_text("[]")
        result = CliRunner().invoke(
            main, ["empty-dirs", str(tmp_path), "-s", str(skip_file)]
        )
        assert result.exit_code == 0
        config = mock_runner_cls.call_args.kwargs["config"]
        assert config.skip_paths_config == skip_file

    def test_missing_skip_config_is_not_an_error(self, tmp_path):
        library = tmp_path / "library"
        (library / "empty").mkdir(parents=True)

        result = CliRunner().invoke(
            main, ["empty-dirs", str(library), "-s", str(tmp_path / "missing.json")]
        )

        assert result.exit_code == 0, result.output + str(result.exception or "")
        assert not (library / "empty").exists()

    def test_directory_from_env(self, mock_runner_cls, tmp_path, monkeypatch):
        monkeypatch.setenv("AUDIO_LIBRARY_PATH", str(tmp_path))
        result = CliRunner().invoke(main, ["formats"])
        assert result.exit_code == 0, result.output + str(result.exception or "")
        root, _ = _run_args(mock_runner_cls)
        assert root == tmp_path

    def test_directory_from_env_file(self, mock_runner_cls, tmp_path):
        env_file = tmp_path / "cleanup.env"
        env_file.write_text(f"AUDIO_LIBRARY_PATH={tmp_path}\n")
        result = CliRunner().invoke(main, ["-c", str(env_file), "formats"])
        assert result.exit_code == 0, result.output + str(result.exception or "")
        root, _ = _run_args(mock_runner_cls)
        assert root == tmp_path


class TestExitCodes:
    def test_no_directory_is_usage_error(self, mock_runner_cls):
        result = CliRunner().invoke(main, ["formats"])
        assert result.exit_code == 2
        assert "No audio directory specified" in result.output
        mock_runner_cls.assert_not_called()

    def test_missing_root_exits_1(self, mock_runner_cls, tmp_path):
        mock_runner_cls.return_value.run.side_effect = ScanRootError(
            tmp_path / "gone"
        )
        result = CliRunner().invoke(main, ["formats", str(tmp_path / "gone")])
        assert result.exit_code == 1
        assert "Directory does not exist" in result.output

    def test_interrupted_exits_130(self, mock_runner_cls, tmp_path):
        mock_runner_cls.return_value.run.return_value = RunSummary(
            root=tmp_path, interrupted=True
        )
        result = CliRunner().invoke(main, ["all", str(tmp_path)])
        assert result.exit_code == 130


class TestEndToEnd:
    def test_duplicates_command(self, tmp_path):
        library = tmp_path / "library"
        library.mkdir()
        (library / "Song.mp3").write_bytes(b"\x00" * 5)
        (library / "Song (2).mp3").write_bytes(b"\x00" * 8)

        result = CliRunner().invoke(main, ["duplicates", str(library)])

        assert result.exit_code == 0, result.output + str(result.exception or "")
        assert sorted(p.name for p in library.iterdir()) == ["Song.mp3"]
        assert (tmp_path / "output" / "cleanup-duplicates.json").exists()
