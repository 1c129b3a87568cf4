"""Content view counters, leaderboard and daily rollups."""
