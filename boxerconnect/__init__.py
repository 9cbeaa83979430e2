"""BoxerConnect media storage service."""
