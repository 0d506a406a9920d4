"""
Gradation engine: sieve analysis and grading envelope compliance.

Raw weights -> calculator -> compliance checker -> TestRecord.
"""
