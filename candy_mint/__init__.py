"""Candy Mint Service Package.

This package provides the orchestration core for minting NFTs from a
Candy Machine v3 through its Candy Guard, including state fetching,
guarded transaction building, and sequential batch minting.
"""

__version__ = "0.1.0"
__author__ = "Candy Mint Contributors"
__email__ = "dev@candymint.example"
