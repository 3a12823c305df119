"""
KeyVars - Global keyboard key state variables

Watches a handful of configured keys through an OS level keyboard hook and
exposes each one as a 0/1 variable for an automation host.
"""

__version__ = "0.1.0"
