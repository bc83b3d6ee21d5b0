"""Small self-contained helpers used across profagent."""
