"""Post processors (pipeline stages) transforming sink documents."""
from .base import PostProcessor, get_stage_registry, register_stage
from .projectors import (
    BlacklistKeyProjector,
    BlacklistValueProjector,
    FieldProjector,
    WhitelistKeyProjector,
    WhitelistValueProjector,
)
from .renamers import RenameByMapping, RenameByRegExp

# The id adder and chain builder depend on sink.strategies and are imported
# from their modules directly (sink.processors.id_adder, sink.processors.chain)

__all__ = [
    "PostProcessor",
    "get_stage_registry",
    "register_stage",
    # Projectors
    "FieldProjector",
    "BlacklistKeyProjector",
    "BlacklistValueProjector",
    "WhitelistKeyProjector",
    "WhitelistValueProjector",
    # Renamers
    "RenameByMapping",
    "RenameByRegExp",
]
