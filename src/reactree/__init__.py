"""reactree: fine-grained incremental computation over an ownership tree."""

from importlib.metadata import version as _version

__version__ = _version("reactree")

from reactree._tracking import (
    drain_pending,
    get_pending_count,
    get_store,
    set_drain_limit,
    set_store,
)
from reactree.errors import (
    DuplicateKey,
    InvariantViolation,
    ReactreeError,
    StaleHandle,
    UnboundedDirtyingCycle,
)
from reactree.store import MemoryStore, StoreAdapter
from reactree.context import ReadContext, TrackingContext, TrackingScope, untracked
from reactree.node import Node, create_child, create_root, destroy, on_destroy, reorder_children
from reactree.mutable import Mutable, create_mutable, set_dispatcher
from reactree.signal import Signal, SignalKind, create_derived, signal
from reactree.reaction import Reaction, create_effect, run_reaction
from reactree.callback import Callback, create_callback, run_callback
from reactree.builder import Builder, build_child, mount
from reactree.cond import cond, switch
from reactree.for_each import for_each, for_each_cmp
from reactree.for_index import for_index
# textual NOT auto-imported — opt-in only

__all__ = [
    "drain_pending",
    "get_pending_count",
    "get_store",
    "set_drain_limit",
    "set_store",
    "DuplicateKey",
    "InvariantViolation",
    "ReactreeError",
    "StaleHandle",
    "UnboundedDirtyingCycle",
    "MemoryStore",
    "StoreAdapter",
    "ReadContext",
    "TrackingContext",
    "TrackingScope",
    "untracked",
    "Node",
    "create_child",
    "create_root",
    "destroy",
    "on_destroy",
    "reorder_children",
    "Mutable",
    "create_mutable",
    "set_dispatcher",
    "Signal",
    "SignalKind",
    "create_derived",
    "signal",
    "Reaction",
    "create_effect",
    "run_reaction",
    "Callback",
    "create_callback",
    "run_callback",
    "Builder",
    "build_child",
    "mount",
    "cond",
    "switch",
    "for_each",
    "for_each_cmp",
    "for_index",
]
