"""Configuration constants for the live quiz client."""
