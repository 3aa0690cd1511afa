"""Unit tests for leaderboard ranking, time-range presets and repository filtering."""

from git_leaderboard.services.github.types import Repository
from git_leaderboard.services.stats.ranking import (
    SORT_KEYS,
    TIME_RANGES,
    filter_repos,
    rank_contributors,
    window_days_for,
)
from git_leaderboard.services.stats.types import ContributorStat


def _stat(login: str, additions: int = 0, deletions: int = 0, **counts: int) -> ContributorStat:
    return ContributorStat(
        login=login,
        avatar_url=None,
        additions=additions,
        deletions=deletions,
        net=additions - deletions,
        commits=counts.get("commits", 0),
        pull_requests=counts.get("pull_requests", 0),
        reviews=counts.get("reviews", 0),
        repos_contributed=1,
        repo_names=("api",),
        weekly=(),
        recent_commits=(),
        recent_pull_requests=(),
        recent_reviews=(),
    )


def _repo(name: str, is_fork: bool = False) -> Repository:
    return Repository(
        id=len(name),
        name=name,
        full_name=f"acme/{name}",
        owner="acme",
        default_branch="main",
        is_fork=is_fork,
    )


STATS = [
    _stat("carol", 5, 0, reviews=9),
    _stat("alice", 10, 8, commits=4),
    _stat("bob", 40, 10, commits=1, pull_requests=2),
]


class TestRankContributors:
    def test_defaults_to_net_descending(self):
        assert [s.login for s in rank_contributors(STATS)] == ["bob", "carol", "alice"]

    def test_sort_by_each_key(self):
        assert rank_contributors(STATS, "commits")[0].login == "alice"
        assert rank_contributors(STATS, "reviews")[0].login == "carol"
        assert rank_contributors(STATS, "deletions")[0].login == "bob"

    def test_ascending(self):
        ranked = rank_contributors(STATS, "additions", descending=False)
        assert [s.login for s in ranked] == ["carol", "alice", "bob"]

    def test_ties_keep_login_order(self):
        tied = [_stat("zed", 1), _stat("amy", 1), _stat("kim", 1)]
        assert [s.login for s in rank_contributors(tied)] == ["amy", "kim", "zed"]

    def test_unknown_key_falls_back_to_net(self):
        assert rank_contributors(STATS, "stars") == rank_contributors(STATS, "net")

    def test_search_filters_logins_case_insensitively(self):
        assert [s.login for s in rank_contributors(STATS, search="AL")] == ["alice"]

    def test_does_not_mutate_input(self):
        original = list(STATS)
        rank_contributors(STATS, "commits")
        assert STATS == original

    def test_every_sort_key_is_a_stat_field(self):
        for key in SORT_KEYS:
            assert hasattr(STATS[0], key)


class TestTimeRanges:
    def test_presets(self):
        assert window_days_for("7d") == 7
        assert window_days_for("180d") == 180
        assert window_days_for("all") is None

    def test_unknown_preset_means_all_time(self):
        assert window_days_for("forever") is None

    def test_preset_keys(self):
        assert list(TIME_RANGES) == ["all", "1d", "7d", "30d", "90d", "180d", "365d"]


class TestFilterRepos:
    REPOS = [_repo("api"), _repo("web-app"), _repo("api-docs", is_fork=True)]

    def test_no_filter_returns_all(self):
        assert filter_repos(self.REPOS) == self.REPOS

    def test_substring_search(self):
        assert [r.name for r in filter_repos(self.REPOS, "API")] == ["api", "api-docs"]

    def test_exclude_forks(self):
        names = [r.name for r in filter_repos(self.REPOS, include_forks=False)]
        assert names == ["api", "web-app"]
