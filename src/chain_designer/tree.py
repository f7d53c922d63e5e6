"""Pure operations over a chain spec tree.

Every function takes a tree snapshot and returns a new one; nodes are never
mutated in place. Containers are walked through a uniform branch view so that
find, insert and replace share one traversal order: sequential children in
order, then case branches in mapping order followed by the default case.
"""

from __future__ import annotations

import logging
from typing import Iterator, NamedTuple, Optional

from chain_designer.exceptions import InvalidInsertTargetError, UnknownChainTypeError
from chain_designer.models.api_spec import APISpec
from chain_designer.models.chain_spec import CaseSpec, ChainSpec, SequentialSpec
from chain_designer.models.llm_spec import LLMSpec
from chain_designer.models.reformat_spec import ReformatSpec

logger = logging.getLogger(__name__)

Branch = tuple[Optional[str], ChainSpec]


class InsertResult(NamedTuple):
    chain_spec: ChainSpec
    next_chain_id: int


class ReplaceResult(NamedTuple):
    chain_spec: Optional[ChainSpec]
    found: bool


def default_chain_spec(chain_type: str, chain_id: int, llm_key: str = "") -> ChainSpec:
    if chain_type == "llm_spec":
        return LLMSpec(chain_id=chain_id, llm_key=llm_key)
    if chain_type == "sequential_spec":
        return SequentialSpec(chain_id=chain_id)
    if chain_type == "case_spec":
        return CaseSpec(chain_id=chain_id)
    if chain_type == "reformat_spec":
        return ReformatSpec(chain_id=chain_id)
    if chain_type == "api_spec":
        return APISpec(chain_id=chain_id)
    raise UnknownChainTypeError(chain_type)


def chain_branches(spec: ChainSpec) -> list[Branch]:
    """
    Children of a node as (label, child) pairs. Sequential children have no
    label; a case default branch comes last with label None, which no case key
    can take.
    """
    if isinstance(spec, SequentialSpec):
        return [(None, chain) for chain in spec.chains]
    if isinstance(spec, CaseSpec):
        branches: list[Branch] = list(spec.cases.items())
        if spec.default_case is not None:
            branches.append((None, spec.default_case))
        return branches
    return []


def with_branches(spec: ChainSpec, branches: list[Branch]) -> ChainSpec:
    """Inverse of chain_branches: rebuild a container around new children."""
    if isinstance(spec, SequentialSpec):
        return spec.model_copy(update={"chains": [chain for _, chain in branches]})
    if isinstance(spec, CaseSpec):
        cases: dict[str, ChainSpec] = {}
        default_case: Optional[ChainSpec] = None
        for label, chain in branches:
            if label is not None:
                cases[label] = chain
            elif default_case is None:
                default_case = chain
            else:
                raise ValueError(f"case_spec {spec.chain_id} can hold only one default case.")
        return spec.model_copy(update={"cases": cases, "default_case": default_case})
    if branches:
        raise ValueError(f"{spec.chain_type} {spec.chain_id} cannot hold child chains.")
    return spec


def iter_chain_specs(tree: Optional[ChainSpec]) -> Iterator[ChainSpec]:
    if tree is None:
        return
    yield tree
    for _, child in chain_branches(tree):
        yield from iter_chain_specs(child)


def max_chain_id(tree: Optional[ChainSpec]) -> int:
    return max((spec.chain_id for spec in iter_chain_specs(tree)), default=-1)


def find_by_chain_id(tree: Optional[ChainSpec], chain_id: int) -> Optional[ChainSpec]:
    if tree is None:
        return None
    if tree.chain_id == chain_id:
        return tree
    for _, child in chain_branches(tree):
        found = find_by_chain_id(child, chain_id)
        if found is not None:
            return found
    return None


def replace_chain_spec(tree: Optional[ChainSpec], chain_id: int, replacement: ChainSpec) -> ReplaceResult:
    """
    Substitute the whole node identified by chain_id, rebuilding its ancestors.
    When nothing matches, the input tree is returned as-is with found=False.
    """
    if tree is None:
        return ReplaceResult(tree, False)
    if tree.chain_id == chain_id:
        return ReplaceResult(replacement, True)
    branches = chain_branches(tree)
    for position, (label, child) in enumerate(branches):
        result = replace_chain_spec(child, chain_id, replacement)
        if result.found and result.chain_spec is not None:
            branches[position] = (label, result.chain_spec)
            return ReplaceResult(with_branches(tree, branches), True)
    return ReplaceResult(tree, False)


def _placeholder_label(spec: CaseSpec) -> str:
    counter = len(spec.cases)
    label = f"case_{counter}"
    while label in spec.cases:
        counter += 1
        label = f"case_{counter}"
    return label


def insert_chain_spec(
    tree: Optional[ChainSpec],
    next_chain_id: int,
    chain_type: str,
    parent_id: int,
    index: int,
    llm_key: str = "",
) -> InsertResult:
    """
    Insert a default node of chain_type under parent_id at index.
    An empty tree ignores parent_id and index and gets the new node as root.
    """
    new_spec = default_chain_spec(chain_type, next_chain_id, llm_key=llm_key)
    if tree is None:
        logger.debug("Created root %s %d", chain_type, next_chain_id)
        return InsertResult(new_spec, next_chain_id + 1)

    parent = find_by_chain_id(tree, parent_id)
    if parent is None:
        raise InvalidInsertTargetError(parent_id, "no chain with that id")

    if isinstance(parent, SequentialSpec):
        chains = list(parent.chains)
        chains.insert(max(0, min(index, len(chains))), new_spec)
        updated: ChainSpec = parent.model_copy(update={"chains": chains})
    elif isinstance(parent, CaseSpec):
        cases = list(parent.cases.items())
        cases.insert(max(0, min(index, len(cases))), (_placeholder_label(parent), new_spec))
        updated = parent.model_copy(update={"cases": dict(cases)})
    else:
        raise InvalidInsertTargetError(parent_id, f"{parent.chain_type} is not a container")

    result = replace_chain_spec(tree, parent_id, updated)
    if not result.found or result.chain_spec is None:
        raise InvalidInsertTargetError(parent_id, "no chain with that id")
    logger.debug("Inserted %s %d under %d at %d", chain_type, next_chain_id, parent_id, index)
    return InsertResult(result.chain_spec, next_chain_id + 1)


def structural_equals(a: Optional[ChainSpec], b: Optional[ChainSpec]) -> bool:
    """
    Sequential children compare in order, case branches by label regardless
    of mapping order, scalar fields by value.
    """
    if a is None or b is None:
        return a is None and b is None
    if a.chain_type != b.chain_type or a.chain_id != b.chain_id:
        return False
    if isinstance(a, SequentialSpec) and isinstance(b, SequentialSpec):
        return len(a.chains) == len(b.chains) and all(
            structural_equals(left, right) for left, right in zip(a.chains, b.chains)
        )
    if isinstance(a, CaseSpec) and isinstance(b, CaseSpec):
        return (
            a.categorization_key == b.categorization_key
            and a.cases.keys() == b.cases.keys()
            and all(structural_equals(chain, b.cases[label]) for label, chain in a.cases.items())
            and structural_equals(a.default_case, b.default_case)
        )
    return a.model_dump() == b.model_dump()
