"""Paws module - внутренняя валюта (лапки)."""

from .exceptions import InsufficientPawsError
from .ledger import PawsLedger

__all__ = [
    "PawsLedger",
    "InsufficientPawsError",
]
