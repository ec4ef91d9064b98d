"""Course recommendation service for the learning marketplace backend."""
