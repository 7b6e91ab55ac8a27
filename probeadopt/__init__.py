"""Probe adoption helpers.

Lets an unadopted probe announce itself on the LAN: a short-lived local HTTP
endpoint serves a one-time token while the control channel is told how to
reach it.
"""

__version__ = "0.1.0"
