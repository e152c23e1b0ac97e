"""
Scan Triage Dashboard Backend

Worklist API for imaging scans, ordered by a keyword-driven AI priority
score so the most pressing studies are reviewed first.
"""

__version__ = "1.0.0"
