"""Walrus Gateway.

HTTP gateway that quotes the cost of storing a file on the Walrus network
and proxies blob uploads and reads.
"""

__version__ = "0.1.0"
