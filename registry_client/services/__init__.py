"""Coordination services: token caching and document submission."""
