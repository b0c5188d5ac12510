"""
CPQ Backend Package

Demo Configure-Price-Quote service: static license/add-on catalog,
stacked-discount pricing and in-memory draft quotes behind a JSON API.
"""

__version__ = "1.0.0"
