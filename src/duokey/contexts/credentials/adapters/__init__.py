"""
Adapters package for credentials bounded context.
"""
