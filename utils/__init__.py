"""
Shared helpers: error taxonomy and service decorators.
"""
