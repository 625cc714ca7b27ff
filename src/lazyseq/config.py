"""
Runtime settings for lazyseq.
"""

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Optional


@dataclass
class SeqConfig:
    """Settings read by eager operations while they materialize elements."""

    # Bytes treated as the memory ceiling; None means physical memory
    memory_limit: Optional[int] = None

    # Elements materialized between two memory samples (0 disables sampling)
    memory_check_interval: int = 10_000

    # Lowest pressure that gets logged: a Pressure member, its name or its value
    pressure_log_level: Any = "MEDIUM"

    # Seconds before the same pressure level is logged again
    log_interval: float = 60.0

    _instance: ClassVar[Optional['SeqConfig']] = None

    @classmethod
    def get_instance(cls) -> 'SeqConfig':
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def set_defaults(cls, **kwargs) -> None:
        """Update the shared settings; unknown names are ignored."""
        instance = cls.get_instance()
        for key, value in kwargs.items():
            if key in {f.name for f in fields(cls)}:
                setattr(instance, key, value)


config = SeqConfig.get_instance()
