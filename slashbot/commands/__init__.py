"""
Bundled slash commands.

Files here and one folder deep are loaded as commands; the ``tooling``
folder holds shared helpers and is never loaded.
"""
