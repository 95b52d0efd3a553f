"""Portfolio performance comparison over a chosen look-back period."""
