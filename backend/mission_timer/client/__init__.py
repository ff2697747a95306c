"""Client-side collaborators of the timer engine: the leaderboard HTTP API
and the real-time interrupt channel."""
