"""Text and timestamp helpers."""
