"""
LinkGuard -- Navigation policy engine for embedded browsing surfaces.

LinkGuard decides, for every URL a web view is about to load, whether the
navigation proceeds silently or waits for the user to confirm leaving.
"""

__version__ = "1.0.0"
__author__ = "LinkGuard Team"
