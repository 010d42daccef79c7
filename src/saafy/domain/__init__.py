"""Domain layer: catalog, playback and discovery."""
