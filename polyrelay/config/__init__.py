from .settings import Settings, settings
from .contracts import ChainRegistry, ContractConfig, default_registry
from .builder import BuilderConfig

__all__ = [
    "Settings",
    "settings",
    "ChainRegistry",
    "ContractConfig",
    "default_registry",
    "BuilderConfig",
]
