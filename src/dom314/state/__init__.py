"""Persistent listened and subscription state."""

from dom314.state.store import LISTENED_TREE, Group, StateStore, Tree

__all__ = ["Group", "LISTENED_TREE", "StateStore", "Tree"]
