"""Helpers shared by command modules."""
