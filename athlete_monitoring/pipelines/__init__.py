# Pipelines: prepare orchestrator.

from .prepare import DEFAULT_PREPARE_CONFIG, prepare, resolve_config

__all__ = ["DEFAULT_PREPARE_CONFIG", "prepare", "resolve_config"]
