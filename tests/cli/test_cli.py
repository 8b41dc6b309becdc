"""
Tests for the treelet command line interface.
"""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from treelet.infrastructure.error_handler import RevisionLookupError
from treelet.interfaces.cli import main
from treelet.models import DownloadResult, DownloadStatus


BASE_ARGS = ["--host-url", "https://gitlab.example.com", "--project-id", "42"]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def mock_run():
    result = DownloadResult(status=DownloadStatus.COMPLETED, revision_id="abc")
    result.downloaded_files = ["proto/a.proto"]
    result.bytes_written = 10
    with patch("treelet.interfaces.cli.run_mirror", new_callable=AsyncMock) as mocked:
        mocked.return_value = result
        yield mocked


def called_config(mock_run):
    return mock_run.await_args.args[0]


def test_token_is_read_from_environment(runner, mock_run, tmp_path):
    outcome = runner.invoke(
        main, BASE_ARGS + ["--state-dir", str(tmp_path)],
        env={"REPOSITORY_TOKEN": "from-env"},
    )

    assert outcome.exit_code == 0, outcome.output
    config = called_config(mock_run)
    assert config.token == "from-env"
    assert config.ref == "master"
    assert config.root_folders == ("proto", "build")
    assert config.include_only.is_empty
    assert config.destination == Path.cwd()
    assert "Downloaded 1 files (10 bytes)" in outcome.output


def test_token_is_required(runner, mock_run):
    outcome = runner.invoke(main, BASE_ARGS, env={"REPOSITORY_TOKEN": None})

    assert outcome.exit_code != 0
    assert "--token" in outcome.output
    mock_run.assert_not_called()


def test_options_build_the_config(runner, mock_run, tmp_path):
    outcome = runner.invoke(main, BASE_ARGS + [
        "-t", "secret",
        "-b", "develop",
        "-i", "docs,api",
        "-d", str(tmp_path / "out"),
        "-r", "schemas",
        "-r", "build",
        "--concurrency", "3",
        "--retries", "2",
        "--timeout", "5",
        "--state-dir", str(tmp_path / "state"),
        "--dry-run",
    ])

    assert outcome.exit_code == 0, outcome.output
    config = called_config(mock_run)
    assert config.token == "secret"
    assert config.ref == "develop"
    assert config.include_only.include_only == ("docs", "api")
    assert config.destination == tmp_path / "out"
    assert config.root_folders == ("schemas", "build")
    assert config.max_concurrent_downloads == 3
    assert config.max_retries == 2
    assert config.timeout == 5.0
    assert config.state_dir == tmp_path / "state"
    assert config.dry_run is True


def test_force_and_reset_flags_are_forwarded(runner, mock_run, tmp_path):
    outcome = runner.invoke(main, BASE_ARGS + [
        "-t", "secret", "--state-dir", str(tmp_path), "--force", "--reset-cache", "-v"
    ])

    assert outcome.exit_code == 0, outcome.output
    _, force, reset_cache, verbose = mock_run.await_args.args
    assert (force, reset_cache, verbose) == (True, True, True)


def test_skipped_run_reports_up_to_date(runner, mock_run, tmp_path):
    mock_run.return_value = DownloadResult(status=DownloadStatus.SKIPPED, revision_id="abc")

    outcome = runner.invoke(main, BASE_ARGS + ["-t", "secret", "--state-dir", str(tmp_path)])

    assert outcome.exit_code == 0
    assert "Already up to date (revision abc)." in outcome.output


def test_revision_lookup_failure_exits_non_zero(runner, mock_run, tmp_path):
    mock_run.side_effect = RevisionLookupError("Could not resolve latest revision of 'master'")

    outcome = runner.invoke(main, BASE_ARGS + ["-t", "secret", "--state-dir", str(tmp_path)])

    assert outcome.exit_code == 1
    assert "Could not resolve latest revision" in outcome.output


def test_invalid_concurrency_is_rejected(runner, mock_run):
    outcome = runner.invoke(main, BASE_ARGS + ["-t", "secret", "--concurrency", "0"])

    assert outcome.exit_code == 2
    mock_run.assert_not_called()


def test_end_to_end_with_fake_gitlab(runner, tmp_path, fake_gitlab):
    service = fake_gitlab({"proto/a.proto": b"syntax", "build/out.bin": b"bin"})
    args = BASE_ARGS + [
        "-t", "secret", "-d", str(tmp_path / "out"), "--state-dir", str(tmp_path / "state")
    ]

    with patch("treelet.interfaces.api.GitLabAPIService", return_value=service):
        first = runner.invoke(main, args)
        second = runner.invoke(main, args)

    assert first.exit_code == 0, first.output
    assert (tmp_path / "out" / "proto" / "a.proto").read_bytes() == b"syntax"
    assert (tmp_path / "out" / "build" / "out.bin").read_bytes() == b"bin"
    assert "Downloaded 2 files" in first.output
    assert second.exit_code == 0, second.output
    assert "Already up to date" in second.output
