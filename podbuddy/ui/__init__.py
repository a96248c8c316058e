"""Terminal display and operator input."""
