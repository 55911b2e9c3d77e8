"""
Persistence adapters.

Two interchangeable backends implement the store contract: the SQL-backed
durable store and the in-process volatile store. The selector picks one at
startup and the facade hides which one is serving.
"""

from .base import EntityStore, RecordStore, StagePlotStore, UserStore, synthesize_stage_plot
from .facade import Repository
from .memory import MemoryStore
from .selector import Backend, BackendSelector, ConnectionState, HealthReport
from .sql_repository import SQLRepository

__all__ = [
    "Backend",
    "BackendSelector",
    "ConnectionState",
    "EntityStore",
    "HealthReport",
    "MemoryStore",
    "RecordStore",
    "Repository",
    "SQLRepository",
    "StagePlotStore",
    "UserStore",
    "synthesize_stage_plot",
]
