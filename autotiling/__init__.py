"""async-autotiling

Automatic split orientation for sway/i3.

This package provides a small long-running daemon that:
- Maintains a persistent IPC connection to sway or i3
- Listens for window focus events
- Picks splitv or splith for the focused container based on its aspect ratio
- Reconnects on its own when the window manager restarts

License: MIT
Version: 1.0.0
"""

__version__ = "1.0.0"
