"""Shared helpers: calendar-month arithmetic and logging setup."""
