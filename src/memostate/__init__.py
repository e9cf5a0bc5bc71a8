"""memostate: memoized computed fields for snapshot state stores."""

from importlib.metadata import version as _version

__version__ = _version("memostate")

from memostate._tracking import DependencyRecord, get_tracking_depth, untrack, untracked
from memostate.computed import Computed, Derivation, computed
from memostate.watch import Watch, watch
from memostate.view import StateView, raw_state
from memostate.cache import SnapshotCache, view_of
from memostate.store import Store
from memostate.action import action, transaction
from memostate.reaction import Reaction, reaction

__all__ = [
    "Computed",
    "Derivation",
    "computed",
    "Watch",
    "watch",
    "untrack",
    "untracked",
    "DependencyRecord",
    "get_tracking_depth",
    "StateView",
    "raw_state",
    "SnapshotCache",
    "view_of",
    "Store",
    "action",
    "transaction",
    "Reaction",
    "reaction",
]
