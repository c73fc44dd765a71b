"""Split summaries and charts."""
