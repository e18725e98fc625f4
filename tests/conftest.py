"""Test configuration for pytest.

This module imports fixtures that should be available to all tests.
"""

# Import fixtures
from tests.fixtures.common import (  # noqa
    addresses,
    guard_snapshot,
    machine_snapshot,
    mint_config,
    mock_fetcher,
    mock_rpc,
    no_wait_scheduler,
    recorded_sleeps,
    wallet,
)
