"""HTTP API for Ideas Hub."""
