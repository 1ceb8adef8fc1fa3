"""Integration tests against the live FatSecret API."""
