"""
Strand pattern comparison: design layout vs. as-cast layout.
"""
