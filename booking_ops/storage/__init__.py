"""
MongoDB access and maintenance operations.
"""
