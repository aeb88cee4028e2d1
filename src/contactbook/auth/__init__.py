"""
Bearer-token authentication and password hashing.
"""
