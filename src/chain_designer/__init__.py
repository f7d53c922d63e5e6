"""Public package exports."""

from chain_designer.dependencies import extract_inputs
from chain_designer.exceptions import ChainSpecError
from chain_designer.exceptions import DirtySessionError
from chain_designer.exceptions import DuplicateChainIdError
from chain_designer.exceptions import InvalidInsertTargetError
from chain_designer.exceptions import NodeNotFoundError
from chain_designer.exceptions import UnknownChainTypeError
from chain_designer.exceptions import UnknownLLMError
from chain_designer.llm_registry import LLMRegistry
from chain_designer.session import ChainSpecSession
from chain_designer.tree import find_by_chain_id
from chain_designer.tree import insert_chain_spec
from chain_designer.tree import replace_chain_spec
from chain_designer.tree import structural_equals

__all__ = [
    "ChainSpecError",
    "ChainSpecSession",
    "DirtySessionError",
    "DuplicateChainIdError",
    "InvalidInsertTargetError",
    "LLMRegistry",
    "NodeNotFoundError",
    "UnknownChainTypeError",
    "UnknownLLMError",
    "extract_inputs",
    "find_by_chain_id",
    "insert_chain_spec",
    "replace_chain_spec",
    "structural_equals",
]
