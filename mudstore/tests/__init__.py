"""mudstore test suite."""
