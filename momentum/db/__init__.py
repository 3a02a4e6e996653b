"""Persistence for progress state, badges, wins and challenges"""
from momentum.db.store import ProgressStore, InMemoryProgressStore

__all__ = ["ProgressStore", "InMemoryProgressStore"]
