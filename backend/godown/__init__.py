"""
Godown inventory API: users, hierarchical storage locations and the items
stored in them.
"""

__version__ = "1.0.0"
