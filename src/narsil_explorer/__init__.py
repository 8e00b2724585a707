"""
narsil-explorer: interactive exploration of narsil-mcp code graphs.
"""

__version__ = "0.1.0"
