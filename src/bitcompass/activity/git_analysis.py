"""Repository summary and git history for a time window.

All git calls run through :func:`asyncio.create_subprocess_exec`; a failing
or missing ``git`` yields empty output rather than an exception, so a log can
still be produced for a repository without a remote or without commits.
"""

from __future__ import annotations

import asyncio
import calendar
import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path

from bitcompass.activity.errors import InvalidDateError
from bitcompass.api.models import TimeFrame

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_INSERTIONS = re.compile(r"(\d+) insertions?")
_DELETIONS = re.compile(r"(\d+) deletions?")
_LOG_FORMAT = "%H%x00%s%x00%ci"


@dataclass
class PeriodBounds:
    period_start: str
    period_end: str
    since: str


@dataclass
class RepoSummary:
    remote_url: str
    branch: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass
class GitCommitInfo:
    hash: str
    subject: str
    date: str


@dataclass
class GitAnalysis:
    commit_count: int = 0
    commits: list[GitCommitInfo] = field(default_factory=list)
    insertions: int = 0
    deletions: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "commit_count": self.commit_count,
            "commits": [asdict(c) for c in self.commits],
            "files_changed": {"insertions": self.insertions, "deletions": self.deletions},
        }


def to_iso(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def _git(args: list[str], cwd: str | Path) -> str:
    try:
        proc = await asyncio.create_subprocess_exec(
            "git",
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd),
        )
        stdout, _ = await proc.communicate()
    except OSError as exc:
        logger.debug("git %s failed: %s", " ".join(args), exc)
        return ""
    if proc.returncode != 0:
        return ""
    return stdout.decode(errors="replace").strip()


async def get_repo_root(cwd: str | Path) -> Path | None:
    """Top-level directory of the work tree containing *cwd*, or ``None``."""
    if not Path(cwd).is_dir():
        return None
    root = await _git(["rev-parse", "--show-toplevel"], cwd)
    if not root or not Path(root).exists():
        return None
    return Path(root)


async def get_repo_summary(repo_root: str | Path) -> RepoSummary:
    remote_url = await _git(["remote", "get-url", "origin"], repo_root)
    branch = await _git(["rev-parse", "--abbrev-ref", "HEAD"], repo_root)
    return RepoSummary(remote_url=remote_url, branch=branch or "HEAD")


def _month_back(moment: datetime) -> datetime:
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    # Clamp e.g. March 31 to the last day of February.
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_for_time_frame(time_frame: TimeFrame, now: datetime | None = None) -> PeriodBounds:
    """Window ending *now*: today since local midnight, last 7 days, or last month."""
    end = now or datetime.now().astimezone()
    if time_frame == "day":
        start = end.replace(hour=0, minute=0, second=0, microsecond=0)
    elif time_frame == "week":
        start = end - timedelta(days=7)
    elif time_frame == "month":
        start = _month_back(end)
    else:
        start = end - timedelta(days=1)
    return PeriodBounds(period_start=to_iso(start), period_end=to_iso(end), since=to_iso(start))


def parse_date(text: str) -> date | None:
    """Parse ``YYYY-MM-DD``; ``None`` for anything else, including Feb 30."""
    match = _ISO_DATE.match(text.strip())
    if not match:
        return None
    try:
        return date(int(match[1]), int(match[2]), int(match[3]))
    except ValueError:
        return None


def period_for_custom_dates(start: str, end: str | None = None) -> PeriodBounds:
    """UTC window covering one day, or an inclusive range of days."""
    start_date = parse_date(start)
    if start_date is None:
        raise InvalidDateError(f"Invalid start date: {start}. Use YYYY-MM-DD.")
    end_date = start_date
    if end is not None and end.strip():
        parsed_end = parse_date(end)
        if parsed_end is None:
            raise InvalidDateError(f"Invalid end date: {end}. Use YYYY-MM-DD.")
        if parsed_end < start_date:
            raise InvalidDateError("End date must be on or after start date.")
        end_date = parsed_end

    period_start = datetime.combine(start_date, time.min, tzinfo=timezone.utc)
    period_end = datetime.combine(end_date, time(23, 59, 59, 999000), tzinfo=timezone.utc)
    return PeriodBounds(
        period_start=to_iso(period_start),
        period_end=to_iso(period_end),
        since=to_iso(period_start),
    )


def parse_commit_log(output: str) -> list[GitCommitInfo]:
    commits: list[GitCommitInfo] = []
    for line in output.splitlines():
        parts = line.split("\0")
        if len(parts) >= 3:
            commits.append(GitCommitInfo(hash=parts[0][:7], subject=parts[1], date=parts[2]))
    return commits


def parse_shortstat(output: str) -> tuple[int, int]:
    insertions = sum(int(m) for m in _INSERTIONS.findall(output))
    deletions = sum(int(m) for m in _DELETIONS.findall(output))
    return insertions, deletions


async def get_git_analysis(
    repo_root: str | Path, since: str, until: str | None = None
) -> GitAnalysis:
    """Commits and line totals between *since* and the optional *until*."""
    window = [f"--since={since}"]
    if until:
        window.append(f"--until={until}")
    log_out = await _git(["log", *window, f"--format={_LOG_FORMAT}"], repo_root)
    commits = parse_commit_log(log_out)
    stat_out = await _git(["log", *window, "--shortstat", "--format="], repo_root)
    insertions, deletions = parse_shortstat(stat_out)
    return GitAnalysis(
        commit_count=len(commits),
        commits=commits,
        insertions=insertions,
        deletions=deletions,
    )
