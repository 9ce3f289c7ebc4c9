"""Version spec parsing and semantic version helpers."""
