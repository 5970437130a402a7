"""HTTP surface of the local control server."""
