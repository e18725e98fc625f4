"""HTTP API for the Candy Mint service."""
