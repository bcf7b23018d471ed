"""App-wide constants."""

MIN_RATING = 1
MAX_RATING = 5
