"""bubbles.tools package

Process entry points around the core (sync server, sync client).

Keep this package's __init__ free of eager imports so `python -m
bubbles.tools.<name>` has no import-time side effects.
"""

__all__: list[str] = []
