"""
boardwise - hardware platform resolution and validation for ARM64 boards.

Identifies which platform profile a device matches, resolves its layered
configuration, composes its device-tree overlays and validates its hardware
components.
"""

__version__ = "0.4.0"
__all__ = ["__version__"]
