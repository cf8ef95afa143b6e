"""
Notion Digest - daily Notion task digests for Discord and JSON-driven Notion record management.
"""

__version__ = "0.1.0"
