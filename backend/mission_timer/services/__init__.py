"""Server-side services: leaderboard storage, interrupt broadcast and the
serial sensor bridge."""
