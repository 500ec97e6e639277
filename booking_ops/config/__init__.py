"""
Configuration loading (YAML + environment) for booking-ops commands.
"""
