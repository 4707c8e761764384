"""Interfaces exposed by the application."""
