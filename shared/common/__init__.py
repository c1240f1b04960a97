# shared/common/__init__.py
"""
Shared helpers used by the Django services.
"""
