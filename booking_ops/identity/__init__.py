"""
Firebase Auth administration: service-account loading and role claims.
"""
