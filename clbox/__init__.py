"""
clbox - launch consensus-layer client nodes in Docker containers.
"""

__version__ = "0.1.0"
