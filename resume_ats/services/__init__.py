"""Analysis services: normalization, rule scoring, AI analysis, caching and merging."""
