"""Upload/download conversion service."""
