"""Service implementations for kiln."""
