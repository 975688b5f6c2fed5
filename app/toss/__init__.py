"""toss - a safer rm.

Moves files and directories into a managed holding area instead of
deleting them, so they can be restored to their original location later.
"""

__version__ = "0.1.0"
