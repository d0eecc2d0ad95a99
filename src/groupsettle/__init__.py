"""Group expense settlement engine."""
