"""ORM Models - SQLAlchemy declarative models for persisted bot state.

Invariants:
    - All models inherit from Base (db/base.py)
    - Notifications are scoped by user_id; nothing references a row by id outside the store

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from triagebot.models.notification import Notification  # noqa: F401
from triagebot.models.merge_commit import MergeCommit  # noqa: F401
