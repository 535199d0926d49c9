"""Variant-specific evidence extraction over a sample's record buffer."""

from .deletion import Deletion
from .observation import Observable, Observation, Pileup
from .snv import SNV

__all__ = [
    "SNV",
    "Deletion",
    "Observable",
    "Observation",
    "Pileup",
]
