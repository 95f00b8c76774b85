"""Shared money, date, logging, and sanitization helpers."""
