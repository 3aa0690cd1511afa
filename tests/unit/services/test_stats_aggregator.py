"""
Tests for the cross-repository aggregator and week helpers.

Tests cover:
- Totals, net lines and the repositories-contributed count
- Window cutoff (inclusive boundary) for commits, pull requests and reviews
- Weekly series length, alignment and zero filling
- Determinism, ordering and all-zero exclusion
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from git_leaderboard.services.github.types import (
    Commit,
    PullRequest,
    PullRequestRef,
    ReviewRecord,
)
from git_leaderboard.services.stats.aggregator import aggregate
from git_leaderboard.services.stats.types import RepoActivity
from git_leaderboard.services.stats.weeks import week_series, week_start_of, window_size

# A Sunday, midday
NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


def _commit(sha: str, login: str, authored_at: str, repo: str = "api") -> Commit:
    return Commit(
        sha=sha,
        author_login=login,
        author_avatar_url=f"https://avatars/{login}",
        message="Change",
        authored_at=authored_at,
        url=f"https://github.com/acme/{repo}/commit/{sha}",
        repo_name=repo,
    )


def _pull(
    number: int,
    login: str,
    merged_at: str | None,
    additions: int | None = None,
    deletions: int | None = None,
    updated_at: str = "2026-10-14T00:00:00Z",
    repo: str = "api",
) -> PullRequest:
    return PullRequest(
        number=number,
        author_login=login,
        author_avatar_url=f"https://avatars/{login}",
        title=f"PR {number}",
        url=f"https://github.com/acme/{repo}/pull/{number}",
        state="closed" if merged_at else "open",
        created_at="2026-09-01T00:00:00Z",
        updated_at=updated_at,
        closed_at=merged_at,
        merged_at=merged_at,
        repo_name=repo,
        additions=additions,
        deletions=deletions,
    )


def _reviews(login: str, *timestamps: str, count: int | None = None) -> dict[str, ReviewRecord]:
    return {
        login: ReviewRecord(
            login=login,
            count=len(timestamps) if count is None else count,
            timestamps=list(timestamps),
            pull_requests=[
                PullRequestRef(
                    repo_name="api",
                    number=100 + i,
                    title="Reviewed",
                    url="",
                    reviewed_at=ts,
                )
                for i, ts in enumerate(timestamps)
            ],
        )
    }


def _by_login(stats):
    return {s.login: s for s in stats}


# ═══════════════════════════════════════════════════════════════════════════
# Week helpers
# ═══════════════════════════════════════════════════════════════════════════


class TestWeekHelpers:
    @pytest.mark.parametrize(
        "value",
        [
            datetime(2026, 10, 11, 0, 0, tzinfo=UTC),
            datetime(2026, 10, 14, 15, 30, tzinfo=UTC),
            datetime(2026, 10, 17, 23, 59, 59, tzinfo=UTC),
            "2026-10-13T08:00:00Z",
            int(datetime(2026, 10, 12, tzinfo=UTC).timestamp()),
        ],
    )
    def test_week_start_is_previous_sunday_midnight(self, value):
        assert week_start_of(value) == datetime(2026, 10, 11, tzinfo=UTC)

    def test_naive_datetime_is_utc(self):
        assert week_start_of(datetime(2026, 10, 18, 6, 0)) == datetime(2026, 10, 18, tzinfo=UTC)

    def test_offset_is_normalized_before_bucketing(self):
        # Sunday 01:00 at +02:00 is still Saturday in UTC
        assert week_start_of("2026-10-18T01:00:00+02:00") == datetime(2026, 10, 11, tzinfo=UTC)

    def test_invalid_string_raises(self):
        with pytest.raises(ValueError):
            week_start_of("yesterday")

    @pytest.mark.parametrize(
        "window_days, expected",
        [(None, 52), (0, 52), (1, 1), (7, 1), (8, 2), (30, 5), (90, 13), (365, 53)],
    )
    def test_window_size(self, window_days, expected):
        assert window_size(window_days) == expected

    def test_week_series_is_contiguous_and_ends_at_current_week(self):
        series = week_series(NOW, 4)

        assert series[-1] == week_start_of(NOW)
        assert all(b - a == timedelta(days=7) for a, b in zip(series, series[1:], strict=False))


# ═══════════════════════════════════════════════════════════════════════════
# Scenarios
# ═══════════════════════════════════════════════════════════════════════════


class TestAggregateScenarios:
    def test_two_repositories_seven_day_window(self):
        repo_a = RepoActivity(
            repo_name="a",
            commits=[
                _commit("c1", "alice", "2026-10-15T10:00:00Z", repo="a"),
                _commit("c2", "alice", "2026-10-12T10:00:00Z", repo="a"),
                _commit("c3", "alice", "2026-10-01T10:00:00Z", repo="a"),
            ],
            pull_requests=[
                _pull(1, "bob", "2026-10-14T09:00:00Z", additions=10, deletions=2, repo="a")
            ],
        )
        repo_b = RepoActivity(repo_name="b")

        stats = _by_login(aggregate([repo_a, repo_b], window_days=7, now=NOW))

        alice, bob = stats["alice"], stats["bob"]
        assert alice.commits == 2
        assert (bob.additions, bob.deletions, bob.net) == (10, 2, 8)
        assert alice.repos_contributed == bob.repos_contributed == 1
        assert alice.repo_names == bob.repo_names == ("a",)

    def test_activity_types_accumulate_across_repositories(self):
        api = RepoActivity(
            repo_name="api",
            commits=[_commit("c1", "alice", "2026-10-12T10:00:00Z")],
            pull_requests=[_pull(1, "alice", "2026-10-13T00:00:00Z", additions=5, deletions=1)],
        )
        web = RepoActivity(
            repo_name="web",
            commits=[_commit("c2", "alice", "2026-10-13T10:00:00Z", repo="web")],
            review_map=_reviews("alice", "2026-10-14T10:00:00Z"),
        )

        (alice,) = aggregate([api, web], now=NOW)

        assert alice.commits == 2
        assert alice.pull_requests == 1
        assert alice.reviews == 1
        assert (alice.additions, alice.deletions, alice.net) == (5, 1, 4)
        assert alice.repo_names == ("api", "web")
        assert alice.avatar_url == "https://avatars/alice"


# ═══════════════════════════════════════════════════════════════════════════
# Window cutoff
# ═══════════════════════════════════════════════════════════════════════════


class TestCutoff:
    def test_commit_at_boundary_is_included_one_millisecond_before_is_not(self):
        cutoff = NOW - timedelta(days=7)
        at_boundary = cutoff.strftime("%Y-%m-%dT%H:%M:%S.000Z")
        just_before = (cutoff - timedelta(milliseconds=1)).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
        activity = RepoActivity(
            repo_name="api",
            commits=[
                _commit("in", "alice", at_boundary),
                _commit("out", "bob", just_before),
            ],
        )

        stats = _by_login(aggregate([activity], window_days=7, now=NOW))

        assert stats["alice"].commits == 1
        assert "bob" not in stats

    def test_pulls_are_filtered_by_effective_date(self):
        activity = RepoActivity(
            repo_name="api",
            pull_requests=[
                # Merged before the window, touched inside it
                _pull(1, "bob", "2026-10-01T00:00:00Z", 50, 0, updated_at="2026-10-15T00:00:00Z"),
                _pull(2, "bob", None, updated_at="2026-10-15T00:00:00Z"),
            ],
        )

        (bob,) = aggregate([activity], window_days=7, now=NOW)

        assert bob.pull_requests == 1
        assert bob.additions == 0

    def test_review_timestamps_are_filtered(self):
        activity = RepoActivity(
            repo_name="api",
            review_map=_reviews("carol", "2026-10-15T00:00:00Z", "2026-09-01T00:00:00Z"),
        )

        (carol,) = aggregate([activity], window_days=7, now=NOW)

        assert carol.reviews == 1
        assert [r.reviewed_at for r in carol.recent_reviews] == ["2026-10-15T00:00:00Z"]

    def test_no_window_counts_everything(self):
        activity = RepoActivity(
            repo_name="api",
            commits=[
                _commit("c1", "alice", "2026-10-12T10:00:00Z"),
                _commit("c2", "alice", "2023-01-02T10:00:00Z"),
            ],
        )

        (alice,) = aggregate([activity], now=NOW)

        assert alice.commits == 2
        # The old commit is outside the 52-week series but still in the totals
        assert sum(w.commits for w in alice.weekly) == 1


# ═══════════════════════════════════════════════════════════════════════════
# Weekly series
# ═══════════════════════════════════════════════════════════════════════════


class TestWeeklySeries:
    @pytest.mark.parametrize("window_days, expected", [(None, 52), (7, 1), (30, 5), (90, 13)])
    def test_length_alignment_and_uniqueness(self, window_days, expected):
        activity = RepoActivity(
            repo_name="api", commits=[_commit("c1", "alice", "2026-10-18T08:00:00Z")]
        )

        (alice,) = aggregate([activity], window_days=window_days, now=NOW)

        starts = [w.week_start for w in alice.weekly]
        assert len(starts) == expected
        assert len(set(starts)) == expected
        assert starts[-1] == week_start_of(NOW)
        assert all(b - a == timedelta(days=7) for a, b in zip(starts, starts[1:], strict=False))

    def test_events_land_in_their_week(self):
        activity = RepoActivity(
            repo_name="api",
            commits=[
                _commit("c1", "alice", "2026-10-12T10:00:00Z"),
                _commit("c2", "alice", "2026-10-17T10:00:00Z"),
                _commit("c3", "alice", "2026-10-18T10:00:00Z"),
            ],
            pull_requests=[_pull(1, "alice", "2026-10-13T00:00:00Z", additions=8, deletions=3)],
            review_map=_reviews("alice", "2026-10-18T09:00:00Z"),
        )

        (alice,) = aggregate([activity], window_days=14, now=NOW)

        previous, current = alice.weekly
        assert previous.week_start == datetime(2026, 10, 11, tzinfo=UTC)
        assert (previous.commits, previous.pull_requests) == (2, 1)
        assert (previous.additions, previous.deletions) == (8, 3)
        assert (current.commits, current.reviews) == (1, 1)

    def test_reviews_without_timestamps_count_in_totals_only(self):
        activity = RepoActivity(repo_name="api", review_map=_reviews("carol", count=4))

        (carol,) = aggregate([activity], now=NOW)

        assert carol.reviews == 4
        assert sum(w.reviews for w in carol.weekly) == 0
        assert carol.repos_contributed == 1

    def test_mixed_dated_and_undated_reviews_all_count(self):
        review_map = _reviews("carol", "2026-10-15T09:00:00Z", count=2)
        activity = RepoActivity(repo_name="api", review_map=review_map)

        (carol,) = aggregate([activity], window_days=30, now=NOW)

        assert carol.reviews == 2
        assert sum(w.reviews for w in carol.weekly) == 1


# ═══════════════════════════════════════════════════════════════════════════
# Output rules
# ═══════════════════════════════════════════════════════════════════════════


class TestOutput:
    def _activity(self) -> RepoActivity:
        return RepoActivity(
            repo_name="api",
            commits=[
                _commit("c1", "alice", "2026-10-12T10:00:00Z"),
                _commit("c2", "bob", "2026-10-13T10:00:00Z"),
            ],
            pull_requests=[
                _pull(1, "bob", "2026-10-14T00:00:00Z", additions=3, deletions=9),
                _pull(2, "dave", "2026-10-14T00:00:00Z", additions=20, deletions=5),
            ],
            review_map=_reviews("carol", "2026-10-15T00:00:00Z"),
        )

    def test_net_is_additions_minus_deletions(self):
        for stat in aggregate([self._activity()], window_days=30, now=NOW):
            assert stat.net == stat.additions - stat.deletions

    def test_aggregation_is_idempotent(self):
        first = aggregate([self._activity()], window_days=30, now=NOW)
        second = aggregate([self._activity()], window_days=30, now=NOW)

        assert first == second

    def test_sorted_by_net_then_commits_then_login(self):
        stats = aggregate([self._activity()], window_days=30, now=NOW)

        assert [s.login for s in stats] == ["dave", "alice", "carol", "bob"]

    def test_all_zero_contributors_are_excluded(self):
        activity = RepoActivity(
            repo_name="api",
            commits=[_commit("c1", "alice", "2026-10-12T10:00:00Z")],
            review_map={
                **_reviews("carol", "2026-09-01T00:00:00Z"),
                **_reviews("erin", count=0),
            },
        )

        stats = aggregate([activity], window_days=7, now=NOW)

        assert [s.login for s in stats] == ["alice"]

    def test_recent_items_are_newest_first_and_capped(self):
        activity = RepoActivity(
            repo_name="api",
            commits=[
                _commit("old", "alice", "2026-10-01T10:00:00Z"),
                _commit("new", "alice", "2026-10-15T10:00:00Z"),
                _commit("mid", "alice", "2026-10-10T10:00:00Z"),
            ],
        )

        (alice,) = aggregate([activity], now=NOW, recent_limit=2)

        assert [c.sha for c in alice.recent_commits] == ["new", "mid"]
        assert alice.commits == 3

    def test_weekly_buckets_are_not_shared_between_runs(self):
        activity = self._activity()
        first = _by_login(aggregate([activity], window_days=14, now=NOW))
        first["alice"].weekly[0].commits += 100

        second = _by_login(aggregate([activity], window_days=14, now=NOW))

        assert second["alice"].weekly[0].commits == 1
