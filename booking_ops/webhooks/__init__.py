"""
Smoke tests for the booking-email webhook and the email-hook API.
"""
