"""HTTP surface for the interview assistant."""
