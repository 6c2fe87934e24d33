"""Adapters for outbound calls: rate limiting, transport, signing and registry endpoints."""
