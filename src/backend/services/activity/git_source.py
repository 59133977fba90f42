"""
Collect per-day commit activity, ref markers and search hits from a local git
repository.

The commands are run through :func:`run_git`; everything else is pure parsing
so it can be exercised without a repository.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from backend.models.activity import ActivityChange, DailyStat, Marker, MarkerType, SearchResultMarker
from core.clock import Clock, LocalClock
from core.datetime_utils import day_from_date, day_to_date, get_day

logger = logging.getLogger(__name__)

RECORD_SEP = "\x1e"
LOG_FORMAT = f"--pretty=format:{RECORD_SEP}%H%x09%ct"
REF_FORMAT = (
    "--format=%(HEAD)%09%(refname)%09%(upstream)%09%(committerdate:unix)%09%(*committerdate:unix)"
)


class GitActivityError(RuntimeError):
    """A git command failed or its output could not be used."""


@dataclass(frozen=True)
class CommitStat:
    sha: str
    timestamp: int
    additions: int = 0
    deletions: int = 0
    files: int = 0

    @property
    def day(self) -> int:
        return get_day(self.timestamp * 1000)


@dataclass(frozen=True)
class RefInfo:
    marker: Marker
    timestamp: int


@dataclass
class GitActivity:
    data: Dict[int, Optional[DailyStat]] = field(default_factory=dict)
    markers: Dict[int, List[Marker]] = field(default_factory=dict)


def run_git(args: List[str], repo_path: str | Path, *, timeout: float = 30.0) -> str:
    cmd = ["git", *args]
    logger.info("Running %s in %s", " ".join(cmd), repo_path)
    try:
        result = subprocess.run(
            cmd,
            cwd=str(repo_path),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise GitActivityError(f"{' '.join(cmd)} timed out after {timeout:.0f}s") from exc
    except OSError as exc:
        raise GitActivityError(f"Could not run git: {exc}") from exc
    if result.returncode != 0:
        raise GitActivityError(f"{' '.join(cmd)} failed: {result.stderr.strip()}")
    return result.stdout


def _count(token: str) -> int:
    # Binary files report "-" for both columns.
    return int(token) if token.isdigit() else 0


def parse_numstat_log(output: str) -> List[CommitStat]:
    """Parse ``git log --numstat`` output produced with :data:`LOG_FORMAT`."""
    commits: List[CommitStat] = []
    for record in output.split(RECORD_SEP):
        lines = [line for line in record.splitlines() if line.strip()]
        if not lines:
            continue
        header = lines[0].split("\t")
        if len(header) != 2 or not header[1].strip().isdigit():
            logger.warning("Skipping malformed git log record: %r", lines[0])
            continue
        adds = deletes = files = 0
        for line in lines[1:]:
            parts = line.split("\t")
            if len(parts) < 3:
                continue
            adds += _count(parts[0])
            deletes += _count(parts[1])
            files += 1
        commits.append(CommitStat(header[0].strip(), int(header[1]), adds, deletes, files))
    return commits


def aggregate_daily(commits: Iterable[CommitStat], *, start_day: Optional[int] = None) -> Dict[int, Optional[DailyStat]]:
    """Group commits per day, newest day first.

    When ``start_day`` is given it is appended last (as a known empty day if
    there were no commits on it) so the graph window starts there.
    """
    buckets: Dict[int, List[CommitStat]] = {}
    for commit in commits:
        day = commit.day
        if start_day is not None and day < start_day:
            continue
        buckets.setdefault(day, []).append(commit)

    data: Dict[int, Optional[DailyStat]] = {}
    for day in sorted(buckets, reverse=True):
        day_commits = buckets[day]
        newest = max(day_commits, key=lambda c: c.timestamp)
        data[day] = DailyStat(
            commits=len(day_commits),
            activity=ActivityChange(
                additions=sum(c.additions for c in day_commits),
                deletions=sum(c.deletions for c in day_commits),
            ),
            files=sum(c.files for c in day_commits),
            sha=newest.sha,
        )
    if start_day is not None and start_day not in data:
        data[start_day] = None
    return data


def parse_refs(output: str) -> List[RefInfo]:
    """Parse ``git for-each-ref`` output produced with :data:`REF_FORMAT`."""
    rows = []
    for line in output.splitlines():
        parts = line.split("\t")
        if len(parts) != 5:
            continue
        rows.append(parts)

    current_upstreams = {upstream for head, _ref, upstream, _ts, _peeled in rows if head == "*" and upstream}

    refs: List[RefInfo] = []
    for head, refname, _upstream, ts, peeled_ts in rows:
        stamp = peeled_ts or ts
        if not stamp.strip().isdigit():
            continue
        if refname.startswith("refs/heads/"):
            marker = Marker(MarkerType.BRANCH, refname[len("refs/heads/"):], head == "*")
        elif refname.startswith("refs/remotes/"):
            name = refname[len("refs/remotes/"):]
            if name.endswith("/HEAD"):
                continue
            marker = Marker(MarkerType.REMOTE, name, refname in current_upstreams)
        elif refname.startswith("refs/tags/"):
            marker = Marker(MarkerType.TAG, refname[len("refs/tags/"):])
        else:
            continue
        refs.append(RefInfo(marker, int(stamp)))
    return refs


def markers_by_day(refs: Iterable[RefInfo], *, start_day: Optional[int] = None) -> Dict[int, List[Marker]]:
    markers: Dict[int, List[Marker]] = {}
    for ref in refs:
        day = get_day(ref.timestamp * 1000)
        if start_day is not None and day < start_day:
            continue
        markers.setdefault(day, []).append(ref.marker)
    return markers


def window_start(clock: Clock, since_days: int) -> int:
    return day_from_date(day_to_date(clock.today()) - timedelta(days=max(0, int(since_days))))


def load_activity(repo_path: str | Path, *, since_days: int = 365, clock: Optional[Clock] = None) -> GitActivity:
    clock = clock or LocalClock()
    start = window_start(clock, since_days)
    since_arg = f"--since={datetime.fromtimestamp(start / 1000).isoformat()}"

    log_output = run_git(["log", "--all", "--numstat", "--no-renames", LOG_FORMAT, since_arg], repo_path)
    refs_output = run_git(["for-each-ref", REF_FORMAT, "refs/heads", "refs/remotes", "refs/tags"], repo_path)

    commits = parse_numstat_log(log_output)
    activity = GitActivity(
        data=aggregate_daily(commits, start_day=start),
        markers=markers_by_day(parse_refs(refs_output), start_day=start),
    )
    logger.info(
        "Loaded %d commits over %d active days and %d marker days from %s",
        len(commits),
        sum(1 for stat in activity.data.values() if stat is not None),
        len(activity.markers),
        repo_path,
    )
    return activity


def parse_search_output(output: str) -> Dict[int, SearchResultMarker]:
    """One hit per day: the first (newest) matching commit wins."""
    results: Dict[int, SearchResultMarker] = {}
    for line in output.splitlines():
        parts = line.strip().split("\t")
        if len(parts) != 2 or not parts[1].isdigit():
            continue
        day = get_day(int(parts[1]) * 1000)
        results.setdefault(day, SearchResultMarker(sha=parts[0]))
    return results


def search_commits(repo_path: str | Path, query: str) -> Dict[int, SearchResultMarker]:
    if not query.strip():
        return {}
    output = run_git(
        ["log", "--all", "-i", f"--grep={query}", "--pretty=format:%H%x09%ct"],
        repo_path,
    )
    return parse_search_output(output)


__all__ = [
    "CommitStat",
    "GitActivity",
    "GitActivityError",
    "RefInfo",
    "aggregate_daily",
    "load_activity",
    "markers_by_day",
    "parse_numstat_log",
    "parse_refs",
    "parse_search_output",
    "run_git",
    "search_commits",
    "window_start",
]
