"""Rainbow sighting atmospheric correlation service."""
