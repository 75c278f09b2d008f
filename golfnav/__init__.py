"""Course-relative positioning and distance engine for on-course play."""

__version__ = "0.1.0"
