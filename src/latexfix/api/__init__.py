"""HTTP surface of the compile service."""
