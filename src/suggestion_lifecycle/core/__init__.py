"""Core utilities: exceptions, time handling, event bus."""
