"""
Hospital bed coordinator backend.
"""
