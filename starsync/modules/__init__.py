"""StarSync domain modules: claims, leaderboard, nickname, roster, sync."""
