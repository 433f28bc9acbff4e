"""fs-mutex test suite."""
