"""Core utilities for the Unrecorded backend."""
