"""
Hybrid RBAC + ABAC permission evaluation engine.
"""

__version__ = "1.0.0"
