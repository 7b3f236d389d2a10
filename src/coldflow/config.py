"""
Configuration management for coldflow.
"""

from typing import Optional
from dataclasses import dataclass


@dataclass
class FlowConfig:
    """Global configuration for stream runs."""

    # Console output
    elapsed_format: str = "Time passed: {elapsed} ms | {message}"

    # Launched runs
    task_name_prefix: str = "coldflow-run"
    log_failed_launches: bool = True

    # Profiling
    profile_memory: bool = True  # Sample process RSS at each emission
    profile_summary: bool = True

    _instance: Optional['FlowConfig'] = None

    @classmethod
    def get_instance(cls) -> 'FlowConfig':
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def set_defaults(cls, **kwargs) -> None:
        """Set default configuration values."""
        instance = cls.get_instance()
        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)

    def task_name(self, run_id: int) -> str:
        """Name of the asyncio task driving a launched run."""
        return f"{self.task_name_prefix}-{run_id}"


# Global configuration instance
config = FlowConfig.get_instance()
