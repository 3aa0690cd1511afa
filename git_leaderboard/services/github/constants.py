"""Constants for GitHub service."""

# Cache key namespaces, one per logical query
CACHE_NS_REPOS = "repos"
CACHE_NS_STATS = "stats"
CACHE_NS_COMMITS = "commits"
CACHE_NS_PULLS = "prs"
CACHE_NS_REVIEWS = "reviews"

# Status codes with special meaning on specific endpoints
STATUS_STATS_COMPUTING = 202  # /stats/contributors is still being generated
STATUS_NO_CONTENT = 204  # /stats/contributors on a repository without commits
STATUS_EMPTY_REPOSITORY = 409  # /commits on a repository without commits

# Error context kinds for 404 wording
KIND_ORGANIZATION = "organization"
KIND_REPOSITORY = "repository"

# Commit-derived stats look back this far when the stats endpoint is unavailable
FALLBACK_LOOKBACK_DAYS = 365
