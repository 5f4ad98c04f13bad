"""
Service layer for lksip.
"""
