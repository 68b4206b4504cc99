"""Output layer: directive text, Rich rendering, and JSON formatting."""
