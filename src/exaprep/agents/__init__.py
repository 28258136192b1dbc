"""Model-backed agents."""
