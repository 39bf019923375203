from .loader import load_config
from .models import (
    LLMSettings,
    OutputConfig,
    RepoDiagramConfig,
    SnapshotConfig,
    SynthesisConfig,
)

__all__ = [
    "LLMSettings",
    "OutputConfig",
    "RepoDiagramConfig",
    "SnapshotConfig",
    "SynthesisConfig",
    "load_config",
]
