"""Versioned diagram storage service."""
