from .clock import ManualTickSource
from .ledger import InMemoryOwnershipLedger

__all__ = ["InMemoryOwnershipLedger", "ManualTickSource"]
