"""Infrastructure helpers: Redis access and circuit breaking."""
