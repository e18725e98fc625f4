"""Wallet session abstractions.

The minting core only needs a connected flag, the signer identity and a
way to sign a transaction. ``KeypairWallet`` provides these from a local
Solana CLI keypair file.
"""

import json
from pathlib import Path
from typing import Protocol, runtime_checkable

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from candy_mint.logging_config import get_logger
from candy_mint.utils.errors import ConfigurationError

logger = get_logger(__name__)


@runtime_checkable
class WalletSession(Protocol):
    """A connected wallet able to approve transactions."""

    @property
    def connected(self) -> bool:
        ...

    @property
    def public_key(self) -> Pubkey:
        ...

    async def sign_transaction(self, transaction: Transaction) -> Transaction:
        ...


class KeypairWallet:
    """Wallet session backed by an in-memory keypair."""

    def __init__(self, keypair: Keypair):
        self._keypair = keypair
        self._connected = True

    @classmethod
    def from_file(cls, path: str) -> "KeypairWallet":
        """Load a keypair from a Solana CLI JSON file (64-byte array).

        Raises:
            ConfigurationError: If the file is missing or malformed
        """
        keypair_path = Path(path)
        try:
            secret = json.loads(keypair_path.read_text())
            keypair = Keypair.from_bytes(bytes(secret))
        except (OSError, ValueError, TypeError) as e:
            raise ConfigurationError(
                f"Failed to load wallet keypair from {path}: {str(e)}",
                details={"path": path}
            ) from e
        logger.info(f"Loaded wallet {keypair.pubkey()} from {path}")
        return cls(keypair)

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def public_key(self) -> Pubkey:
        return self._keypair.pubkey()

    def disconnect(self) -> None:
        self._connected = False

    async def sign_transaction(self, transaction: Transaction) -> Transaction:
        transaction.partial_sign([self._keypair], transaction.message.recent_blockhash)
        return transaction
