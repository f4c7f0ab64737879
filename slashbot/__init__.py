"""
slashbot

Slash-command scaffold for Discord: loads command files, publishes them
to the application API and dispatches interactions to their handlers.
"""

__version__ = "0.1.0"
