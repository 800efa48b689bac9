"""Identity-assigning post processor."""
import logging

from sink.core.enums import StageResult
from sink.core.records import ID_FIELD, SinkDocument, SinkRecord
from sink.core.resolver import ConfigResolver
from sink.processors.base import PostProcessor, register_stage
from sink.strategies.selection import get_id_strategy

logger = logging.getLogger(__name__)


@register_stage("document_id_adder")
class DocumentIdAdder(PostProcessor):
    """
    Sets the value document's ``_id`` using the destination's id strategy.

    Every chain contains this stage exactly once. The ``_id`` is placed first
    in the value document, replacing any existing one.
    """

    def __init__(self, config: ConfigResolver, destination: str):
        super().__init__(config, destination)
        self.id_strategy = get_id_strategy(config, destination)

    def process(self, doc: SinkDocument, record: SinkRecord) -> StageResult:
        if doc.value_doc is not None:
            document_id = self.id_strategy.generate_id(doc, record)
            rest = {k: v for k, v in doc.value_doc.items() if k != ID_FIELD}
            doc.value_doc = {ID_FIELD: document_id, **rest}
        return StageResult.CONTINUE

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(destination='{self.destination}', id_strategy={self.id_strategy!r})"
