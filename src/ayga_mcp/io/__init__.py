"""I/O - remote backend access."""
