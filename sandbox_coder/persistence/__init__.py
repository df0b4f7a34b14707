"""Persistence of job results."""

from .store import FileResultStore, HttpResultStore, ResultStore

__all__ = ["FileResultStore", "HttpResultStore", "ResultStore"]
