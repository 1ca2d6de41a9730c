"""Host adapters for the studio."""
