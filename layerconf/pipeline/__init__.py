"""Configuration load pipeline."""

from layerconf.pipeline.orchestrator import ConfigLoadOrchestrator

__all__ = ["ConfigLoadOrchestrator"]
