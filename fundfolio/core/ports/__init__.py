"""Port interfaces for fundfolio.

Ports define abstract interfaces that adapters must implement.
Following hexagonal architecture, core depends only on ports.
"""

from fundfolio.core.ports.event_port import EventLevel, EventSink, NullEventSink
from fundfolio.core.ports.storage_port import (
    SnapshotFormatError,
    StorageError,
    StoragePort,
)
from fundfolio.core.ports.valuation_port import (
    ValuationLookupError,
    ValuationPermissionError,
    ValuationPort,
)

__all__ = [
    # ValuationPort
    "ValuationPort",
    "ValuationLookupError",
    "ValuationPermissionError",
    # StoragePort
    "StoragePort",
    "StorageError",
    "SnapshotFormatError",
    # EventSink
    "EventSink",
    "EventLevel",
    "NullEventSink",
]
