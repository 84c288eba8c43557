"""Build an activity log from git history and push it to the backend."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Literal

from bitcompass.activity.errors import InvalidDateError, NotAGitRepositoryError
from bitcompass.activity.git_analysis import (
    PeriodBounds,
    get_git_analysis,
    get_repo_root,
    get_repo_summary,
    parse_date,
    period_for_time_frame,
)
from bitcompass.api.client import RestClient
from bitcompass.api.models import ActivityLog, ActivityLogInsert, TimeFrame

logger = logging.getLogger(__name__)

ProgressStep = Literal["analyzing", "pushing"]

LOG_USAGE = (
    "Usage: bitcompass log [YYYY-MM-DD] or bitcompass log [YYYY-MM-DD] [YYYY-MM-DD] "
    "or bitcompass log [YYYY-MM-DD] - [YYYY-MM-DD]"
)


async def _push(
    client: RestClient,
    repo_root: Path,
    period: PeriodBounds,
    time_frame: TimeFrame,
    on_progress: Callable[[ProgressStep], None] | None,
) -> ActivityLog:
    if on_progress:
        on_progress("analyzing")
    summary = await get_repo_summary(repo_root)
    analysis = await get_git_analysis(repo_root, period.since, period.period_end)
    payload = ActivityLogInsert(
        time_frame=time_frame,
        period_start=period.period_start,
        period_end=period.period_end,
        repo_summary=summary.to_dict(),
        git_analysis=analysis.to_dict(),
    )
    if on_progress:
        on_progress("pushing")
    created = await client.insert_activity_log(payload)
    logger.info("Pushed activity log %s (%d commits)", created.id, analysis.commit_count)
    return created


async def build_and_push_activity_log(
    client: RestClient,
    time_frame: TimeFrame,
    cwd: str | Path,
    on_progress: Callable[[ProgressStep], None] | None = None,
) -> ActivityLog:
    """Summarize the repository at *cwd* for *time_frame* and push the log.

    Raises:
        NotAGitRepositoryError: When *cwd* is not inside a git work tree.
        BackendError: When the insert fails.
    """
    repo_root = await get_repo_root(cwd)
    if repo_root is None:
        raise NotAGitRepositoryError()
    return await _push(client, repo_root, period_for_time_frame(time_frame), time_frame, on_progress)


async def build_and_push_activity_log_with_period(
    client: RestClient,
    period: PeriodBounds,
    time_frame: TimeFrame,
    cwd: str | Path,
    on_progress: Callable[[ProgressStep], None] | None = None,
) -> ActivityLog:
    """Same as :func:`build_and_push_activity_log` for an explicit period."""
    repo_root = await get_repo_root(cwd)
    if repo_root is None:
        raise NotAGitRepositoryError()
    return await _push(client, repo_root, period, time_frame, on_progress)


def parse_log_args(args: list[str] | tuple[str, ...]) -> tuple[str, str | None] | None:
    """Accept ``[start]``, ``[start, end]`` or ``[start, "-", end]``.

    Returns ``None`` for no arguments (interactive mode).
    """
    trimmed = [a.strip() for a in args if a.strip()]
    if not trimmed:
        return None

    def is_date(s: str) -> bool:
        return parse_date(s) is not None

    if len(trimmed) == 1 and is_date(trimmed[0]):
        return trimmed[0], None
    if len(trimmed) == 2 and is_date(trimmed[0]) and is_date(trimmed[1]):
        return trimmed[0], trimmed[1]
    if len(trimmed) == 3 and is_date(trimmed[0]) and trimmed[1] == "-" and is_date(trimmed[2]):
        return trimmed[0], trimmed[2]
    raise InvalidDateError(LOG_USAGE)


def time_frame_for_range(start: str, end: str) -> TimeFrame:
    """Classify an inclusive date range: 1 day, up to 7 days, or longer."""
    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date is None or end_date is None:
        raise InvalidDateError(LOG_USAGE)
    days = (end_date - start_date).days + 1
    if days <= 1:
        return "day"
    if days <= 7:
        return "week"
    return "month"
