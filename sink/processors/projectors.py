"""
Field Projectors
================

Post processors that remove fields from the key or value document.

- Blacklist: listed paths are removed, everything else is kept
- Whitelist: only listed paths are kept

Paths use dot notation for sub documents ("address.city"). Lists of sub
documents are projected element-wise under the list field's path.
Whitelist field sets are expected to contain every ancestor path (see
``build_projection_list``), which is what lets a parent survive while its
children are filtered.
"""

from abc import abstractmethod
from typing import Callable, Iterable, Optional

from sink.core.enums import StageResult
from sink.core.records import ID_FIELD, Document, SinkDocument, SinkRecord
from sink.core.resolver import ConfigResolver
from sink.processors.base import PostProcessor, get_stage_registry

SUB_FIELD_SEPARATOR = "."

# Decides, given the config, whether the projector is active
ProjectionPredicate = Callable[[ConfigResolver], bool]


class FieldProjector(PostProcessor):
    """
    Base class for projectors.

    Constructed either directly with an explicit field set and predicate
    (as id strategies do for their key projection), or as a pipeline stage
    from ``(config, destination)`` via ``from_config``.
    """

    def __init__(
        self,
        config: ConfigResolver,
        fields: Iterable[str],
        predicate: ProjectionPredicate,
        destination: str,
    ):
        super().__init__(config, destination)
        self.fields = frozenset(fields)
        self.predicate = predicate

    @abstractmethod
    def target(self, doc: SinkDocument) -> Optional[Document]:
        """The document (key or value) this projector works on."""
        pass

    @abstractmethod
    def _project(self, document: Document, prefix: str) -> None:
        pass

    def project(self, document: Document) -> Document:
        """Project ``document`` in place and return it."""
        self._project(document, "")
        return document

    def process(self, doc: SinkDocument, record: SinkRecord) -> StageResult:
        if self.predicate(self.config):
            document = self.target(doc)
            if document is not None:
                self.project(document)
        return StageResult.CONTINUE

    def _children(self, value) -> list[Document]:
        if isinstance(value, dict):
            return [value]
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict)]
        return []


class BlacklistProjector(FieldProjector):

    def _project(self, document: Document, prefix: str) -> None:
        for name in list(document):
            path = prefix + name
            if path in self.fields:
                del document[name]
                continue
            for child in self._children(document[name]):
                self._project(child, path + SUB_FIELD_SEPARATOR)


class WhitelistProjector(FieldProjector):
    # When set, a top-level _id survives regardless of the field list
    keep_id = False

    def _project(self, document: Document, prefix: str) -> None:
        for name in list(document):
            path = prefix + name
            if path not in self.fields and not (self.keep_id and not prefix and name == ID_FIELD):
                del document[name]
                continue
            if self._has_listed_children(path):
                for child in self._children(document[name]):
                    self._project(child, path + SUB_FIELD_SEPARATOR)

    def _has_listed_children(self, path: str) -> bool:
        # A listed path without listed children keeps its whole subtree
        child_prefix = path + SUB_FIELD_SEPARATOR
        return any(field.startswith(child_prefix) for field in self.fields)


# =============================================================================
# Key / value variants
# =============================================================================

class _KeyTarget:
    def target(self, doc: SinkDocument) -> Optional[Document]:
        return doc.key_doc


class _ValueTarget:
    def target(self, doc: SinkDocument) -> Optional[Document]:
        return doc.value_doc


class BlacklistKeyProjector(_KeyTarget, BlacklistProjector):

    @classmethod
    def from_config(cls, config: ConfigResolver, destination: str) -> "BlacklistKeyProjector":
        return cls(
            config,
            config.key_projection_list(destination),
            lambda cfg: cfg.is_using_blacklist_key_projection(destination),
            destination,
        )


class WhitelistKeyProjector(_KeyTarget, WhitelistProjector):

    @classmethod
    def from_config(cls, config: ConfigResolver, destination: str) -> "WhitelistKeyProjector":
        return cls(
            config,
            config.key_projection_list(destination),
            lambda cfg: cfg.is_using_whitelist_key_projection(destination),
            destination,
        )


class BlacklistValueProjector(_ValueTarget, BlacklistProjector):

    @classmethod
    def from_config(cls, config: ConfigResolver, destination: str) -> "BlacklistValueProjector":
        return cls(
            config,
            config.value_projection_list(destination),
            lambda cfg: cfg.is_using_blacklist_value_projection(destination),
            destination,
        )


class WhitelistValueProjector(_ValueTarget, WhitelistProjector):
    keep_id = True

    @classmethod
    def from_config(cls, config: ConfigResolver, destination: str) -> "WhitelistValueProjector":
        return cls(
            config,
            config.value_projection_list(destination),
            lambda cfg: cfg.is_using_whitelist_value_projection(destination),
            destination,
        )


# Stage construction goes through from_config: (config, destination)
for _name, _projector in (
    ("blacklist_key_projector", BlacklistKeyProjector),
    ("whitelist_key_projector", WhitelistKeyProjector),
    ("blacklist_value_projector", BlacklistValueProjector),
    ("whitelist_value_projector", WhitelistValueProjector),
):
    get_stage_registry().register_factory(_name)(_projector.from_config)
