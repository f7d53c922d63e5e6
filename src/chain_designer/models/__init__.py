"""Model types for chain specs and their collaborators."""

from chain_designer.models.api_spec import APISpec
from chain_designer.models.chain_document import ChainDocument
from chain_designer.models.chain_spec import CHAIN_TYPES
from chain_designer.models.chain_spec import CaseSpec
from chain_designer.models.chain_spec import ChainSpec
from chain_designer.models.chain_spec import SequentialSpec
from chain_designer.models.chain_spec import dump_chain_spec
from chain_designer.models.chain_spec import parse_chain_spec
from chain_designer.models.llm_descriptor import LLMDescriptor
from chain_designer.models.llm_spec import LLMSpec
from chain_designer.models.reformat_spec import ReformatSpec

__all__ = [
    "APISpec",
    "CHAIN_TYPES",
    "CaseSpec",
    "ChainDocument",
    "ChainSpec",
    "LLMDescriptor",
    "LLMSpec",
    "ReformatSpec",
    "SequentialSpec",
    "dump_chain_spec",
    "parse_chain_spec",
]
