"""
Utility modules for the provider management engine.

This package contains the store query modules the services build on, plus
datetime helpers and the assignment precondition checks.
"""
