"""
Client for the Godown inventory API: tree reconciliation, dashboard state
and a NiceGUI dashboard.
"""

__version__ = "1.0.0"
