"""Tracker port and its GitHub implementation."""
