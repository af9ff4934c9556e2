"""General commands: ping and launcher status."""
