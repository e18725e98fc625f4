"""Program adapters for on-chain accounts and instructions."""
