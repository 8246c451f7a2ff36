"""Console output for dbctl."""
