# BurnNote Test Suite
"""
Unit, service and HTTP tests.

Run with: pytest
"""
