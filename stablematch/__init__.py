"""
stablematch - generalized stable matching engine.

Builds preference lists from requirement/property data, decodes candidate
vectors into concrete matchings and scores them for an external optimizer.
"""

__app_name__ = "stablematch"
__version__ = "0.1.0"
