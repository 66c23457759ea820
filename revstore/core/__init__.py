"""Core module - configuration, errors, and identifiers"""
