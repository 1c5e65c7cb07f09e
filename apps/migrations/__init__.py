"""
Database migration entrypoints.
"""
