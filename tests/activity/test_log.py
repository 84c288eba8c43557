"""Tests for building and pushing activity logs."""

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from bitcompass.activity.errors import InvalidDateError, NotAGitRepositoryError
from bitcompass.activity.git_analysis import GitAnalysis, GitCommitInfo, RepoSummary, period_for_custom_dates
from bitcompass.activity.log import (
    build_and_push_activity_log,
    build_and_push_activity_log_with_period,
    parse_log_args,
    time_frame_for_range,
)


@pytest.fixture
def git_repo() -> Any:
    analysis = GitAnalysis(
        commit_count=1,
        commits=[GitCommitInfo(hash="abc1234", subject="Init", date="2025-01-01")],
        insertions=3,
    )
    with (
        patch("bitcompass.activity.log.get_repo_root", AsyncMock(return_value=Path("/repo"))) as root,
        patch(
            "bitcompass.activity.log.get_repo_summary",
            AsyncMock(return_value=RepoSummary(remote_url="git@x:y.git", branch="main")),
        ),
        patch("bitcompass.activity.log.get_git_analysis", AsyncMock(return_value=analysis)) as git,
    ):
        yield root, git


def _client(log_factory: Any) -> MagicMock:
    client = MagicMock()
    client.insert_activity_log = AsyncMock(return_value=log_factory())
    return client


class TestBuildAndPush:
    async def test_pushes_payload(self, git_repo: Any, log_factory: Any) -> None:
        client = _client(log_factory)
        steps: list[str] = []
        created = await build_and_push_activity_log(client, "week", "/repo/src", steps.append)

        assert created.id == "log-1"
        assert steps == ["analyzing", "pushing"]
        payload = client.insert_activity_log.await_args.args[0]
        assert payload.time_frame == "week"
        assert payload.repo_summary == {"remote_url": "git@x:y.git", "branch": "main"}
        assert payload.git_analysis["commit_count"] == 1
        assert payload.git_analysis["files_changed"] == {"insertions": 3, "deletions": 0}

    async def test_not_a_repo(self, git_repo: Any, log_factory: Any) -> None:
        root, _ = git_repo
        root.return_value = None
        client = _client(log_factory)
        with pytest.raises(NotAGitRepositoryError, match="Not a git repository"):
            await build_and_push_activity_log(client, "day", "/tmp")
        client.insert_activity_log.assert_not_awaited()

    async def test_explicit_period(self, git_repo: Any, log_factory: Any) -> None:
        _, git = git_repo
        client = _client(log_factory)
        period = period_for_custom_dates("2025-01-01", "2025-01-03")
        await build_and_push_activity_log_with_period(client, period, "week", "/repo")

        git.assert_awaited_once_with(Path("/repo"), period.since, period.period_end)
        payload = client.insert_activity_log.await_args.args[0]
        assert payload.period_start == "2025-01-01T00:00:00.000Z"


class TestParseLogArgs:
    @pytest.mark.parametrize(
        ("args", "expected"),
        [
            ((), None),
            (("  ",), None),
            (("2025-01-01",), ("2025-01-01", None)),
            (("2025-01-01", "2025-01-05"), ("2025-01-01", "2025-01-05")),
            (("2025-01-01", "-", "2025-01-05"), ("2025-01-01", "2025-01-05")),
        ],
    )
    def test_valid(self, args: tuple[str, ...], expected: Any) -> None:
        assert parse_log_args(args) == expected

    @pytest.mark.parametrize(
        "args",
        [("yesterday",), ("2025-01-01", "x"), ("2025-01-01", "to", "2025-01-05"), ("a", "b", "c", "d")],
    )
    def test_invalid(self, args: tuple[str, ...]) -> None:
        with pytest.raises(InvalidDateError, match="Usage: bitcompass log"):
            parse_log_args(args)


@pytest.mark.parametrize(
    ("start", "end", "frame"),
    [
        ("2025-01-01", "2025-01-01", "day"),
        ("2025-01-01", "2025-01-07", "week"),
        ("2025-01-01", "2025-01-08", "month"),
    ],
)
def test_time_frame_for_range(start: str, end: str, frame: str) -> None:
    assert time_frame_for_range(start, end) == frame
