"""Editing session over a committed and a working chain spec tree."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional

from chain_designer.exceptions import (
    DirtySessionError,
    DuplicateChainIdError,
    NodeNotFoundError,
    UnknownLLMError,
)
from chain_designer.llm_registry import LLMRegistry
from chain_designer.models.chain_document import ChainDocument
from chain_designer.models.chain_spec import ChainSpec
from chain_designer.models.llm_spec import LLMSpec
from chain_designer.tree import (
    find_by_chain_id,
    insert_chain_spec,
    iter_chain_specs,
    max_chain_id,
    replace_chain_spec,
    structural_equals,
)

logger = logging.getLogger(__name__)


class ChainSpecSession:
    """
    Single-writer edit buffer for one chain document. Inserts and updates only
    touch the working tree; the committed tree changes on load and commit.
    The id allocator lives here so chain ids stay unique across the tree.
    """

    def __init__(self, llm_registry: LLMRegistry | None = None) -> None:
        self.llm_registry: LLMRegistry | None = llm_registry
        self.committed: Optional[ChainSpec] = None
        self.working: Optional[ChainSpec] = None
        self.next_chain_id: int = 0
        self.name: str = ""
        self.revision: Optional[str] = None

    @classmethod
    def from_document(cls, document: ChainDocument, llm_registry: LLMRegistry | None = None) -> "ChainSpecSession":
        session = cls(llm_registry)
        session.load(document.chain, name=document.name, revision=document.revision)
        return session

    def to_document(self) -> ChainDocument:
        return ChainDocument(name=self.name, revision=self.revision, chain=self.working)

    def load(self, chain_spec: Optional[ChainSpec], *, name: str = "", revision: Optional[str] = None) -> None:
        self._check_unique_ids(chain_spec)
        self.committed = chain_spec
        self.working = chain_spec
        self.next_chain_id = max_chain_id(chain_spec) + 1
        self.name = name
        self.revision = revision
        logger.debug("Loaded chain %r revision %s, next id %d", name, revision, self.next_chain_id)

    @property
    def is_clean(self) -> bool:
        return structural_equals(self.committed, self.working)

    @property
    def ready_to_interact(self) -> bool:
        return self.committed is not None and self.is_clean

    def require_clean(self) -> ChainSpec:
        """Return the committed tree, or raise if it is missing or has pending edits."""
        if self.committed is None:
            raise DirtySessionError("No committed chain spec.")
        if not self.is_clean:
            raise DirtySessionError("Chain spec has uncommitted edits.")
        return self.committed

    def find(self, chain_id: int) -> Optional[ChainSpec]:
        return find_by_chain_id(self.working, chain_id)

    def get(self, chain_id: int) -> ChainSpec:
        spec = self.find(chain_id)
        if spec is None:
            raise NodeNotFoundError(chain_id)
        return spec

    def insert(self, chain_type: str, parent_id: int = 0, index: int = 0) -> ChainSpec:
        """Insert a default node and return it."""
        llm_key = self.llm_registry.default_key() if self.llm_registry is not None else ""
        chain_id = self.next_chain_id
        result = insert_chain_spec(self.working, chain_id, chain_type, parent_id, index, llm_key=llm_key)
        self.working = result.chain_spec
        self.next_chain_id = result.next_chain_id
        return self.get(chain_id)

    def update(self, spec: ChainSpec) -> None:
        """Replace the node with spec.chain_id by spec, subtree included."""
        self._check_llm_keys(spec)
        result = replace_chain_spec(self.working, spec.chain_id, spec)
        if not result.found:
            raise NodeNotFoundError(spec.chain_id)
        self._check_unique_ids(result.chain_spec)
        self.working = result.chain_spec
        self.next_chain_id = max(self.next_chain_id, max_chain_id(self.working) + 1)
        logger.debug("Updated %s %d", spec.chain_type, spec.chain_id)

    def commit(self, revision: Optional[str] = None) -> Optional[ChainSpec]:
        self.committed = self.working
        if revision is not None:
            self.revision = revision
        logger.info("Committed chain %r revision %s", self.name, self.revision)
        return self.committed

    def revert(self) -> None:
        self.working = self.committed

    def _check_llm_keys(self, spec: ChainSpec) -> None:
        if self.llm_registry is None:
            return
        for node in iter_chain_specs(spec):
            if isinstance(node, LLMSpec) and node.llm_key and node.llm_key not in self.llm_registry:
                raise UnknownLLMError(node.llm_key)

    @staticmethod
    def _check_unique_ids(tree: Optional[ChainSpec]) -> None:
        counts = Counter(spec.chain_id for spec in iter_chain_specs(tree))
        duplicates = sorted(chain_id for chain_id, count in counts.items() if count > 1)
        if duplicates:
            raise DuplicateChainIdError(duplicates)
