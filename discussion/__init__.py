"""Live, reconciled view of a post and its comment tree."""
