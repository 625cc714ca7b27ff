"""
lazyseq: lazy, composable operations over Python iterables.

Filtering, mapping, concatenation, slicing and partial consumption never
materialize intermediate collections, so sequences may be infinite or
single-use. Eager operations log memory pressure while they run.
"""

from lazyseq.config import SeqConfig
from lazyseq import iterable
from lazyseq.iterable import EMPTY
from lazyseq.seq import Seq
from lazyseq.memory import MaterializationGuard, Pressure

__version__ = "0.1.0"
__license__ = "Apache-2.0"

__all__ = [
    "SeqConfig",
    "iterable",
    "EMPTY",
    "Seq",
    "MaterializationGuard",
    "Pressure",
]
