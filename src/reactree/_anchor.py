"""Data anchor — plain Python structures that hold all runtime state.

Every node of the ownership tree (plain nodes, reactions, mutables, callbacks)
is an integer id in these tables. Handles are thin wrappers holding an _id;
a node is alive exactly while its id is present in `kinds`.
"""

from __future__ import annotations

import itertools

# Node kinds
NODE = "node"
REACTION = "reaction"
MUTABLE = "mutable"
CALLBACK = "callback"

# Ownership tree
kinds: dict[int, str] = {}
parents: dict[int, int | None] = {}
children: dict[int, list[int]] = {}  # node_id -> child ids, in output order
payloads: dict[int, object] = {}
finalizers: dict[int, list] = {}  # node_id -> on_destroy callables
provided: dict[int, dict] = {}  # node_id -> values visible to descendants

# Reaction state
reactions: dict[int, object] = {}  # reaction_id -> Reaction handle
actions: dict[int, object] = {}  # reaction_id -> callable(cx)
scopes: dict[int, dict] = {}  # reaction_id -> {key: version observed}
subscribers: dict[object, set[int]] = {}  # key -> reaction ids whose scope holds it
errors: dict[int, BaseException] = {}  # reaction_id -> last recoverable failure

# Pending reactions, insertion-ordered (FIFO of first dirtying)
pending: dict[int, None] = {}

# Mutable state — the values themselves live in the store
cell_keys: dict[int, object] = {}

# Callback state
callbacks: dict[int, object] = {}

# Active store adapter, installed by _tracking.set_store()
store = None

_id_counter = itertools.count(1)


def new_id() -> int:
    return next(_id_counter)


def reset() -> None:
    """Forget every node. Ids keep counting so stale handles never alias."""
    for table in (
        kinds, parents, children, payloads, finalizers, provided,
        reactions, actions, scopes, subscribers, errors, pending,
        cell_keys, callbacks,
    ):
        table.clear()
