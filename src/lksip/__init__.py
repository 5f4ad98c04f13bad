"""
lksip: manage LiveKit SIP trunks, dispatch rules and participants from the command line.
"""

__version__ = "0.1.0"
