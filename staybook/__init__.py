"""StayBook short-term rental booking engine."""
