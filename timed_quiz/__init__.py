"""
Timed quiz game: ask questions from a CSV file against the clock.
"""
