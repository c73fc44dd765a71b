"""Excel writers."""
