"""uniterm test suite."""
