"""
Provider management engine.

Assigns providers to patients and to supervising providers through
time-bounded relationships constrained by a configurable role taxonomy.
"""

__version__ = "0.1.0"
