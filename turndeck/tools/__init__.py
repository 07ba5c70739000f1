"""Command-line tools for checking presets and the shuffle."""
