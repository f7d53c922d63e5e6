"""Exceptions raised by chain spec tree operations."""

from __future__ import annotations


class ChainSpecError(Exception):
    """Base class for chain designer errors."""


class NodeNotFoundError(ChainSpecError, LookupError):
    def __init__(self, chain_id: int) -> None:
        self.chain_id = chain_id
        super().__init__(f"Could not find chain spec with id {chain_id} to update")


class InvalidInsertTargetError(ChainSpecError, ValueError):
    def __init__(self, parent_id: int, reason: str) -> None:
        self.parent_id = parent_id
        self.reason = reason
        super().__init__(f"Cannot insert into chain {parent_id}: {reason}")


class UnknownChainTypeError(ChainSpecError, ValueError):
    def __init__(self, chain_type: str) -> None:
        self.chain_type = chain_type
        super().__init__(f"Unknown chain type: {chain_type!r}")


class UnknownLLMError(ChainSpecError, KeyError):
    def __init__(self, llm_key: str) -> None:
        self.llm_key = llm_key
        super().__init__(f"LLM not registered: {llm_key!r}")

    def __str__(self) -> str:
        return str(self.args[0])


class DirtySessionError(ChainSpecError, RuntimeError):
    """Raised when a dirty working tree is treated as runnable."""


class DuplicateChainIdError(ChainSpecError, ValueError):
    def __init__(self, chain_ids: list[int]) -> None:
        self.chain_ids = chain_ids
        super().__init__(f"Duplicate chain ids: {chain_ids}")
