"""
Core module for configuration, logging, error handling and selection logic.

The selection engine is not imported at package level so that models and
schemas can import ``settings`` from here without a cycle. Import it
directly: from simulation_builder.core.smart_selection import ...
"""
from .config import settings

__all__ = ["settings"]
