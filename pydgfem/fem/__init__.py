"""Reference elements, geometric maps and basis tables."""
