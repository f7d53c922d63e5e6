import pytest

from chain_designer.exceptions import DirtySessionError
from chain_designer.exceptions import DuplicateChainIdError
from chain_designer.exceptions import InvalidInsertTargetError
from chain_designer.exceptions import NodeNotFoundError
from chain_designer.exceptions import UnknownLLMError
from chain_designer.llm_registry import LLMRegistry
from chain_designer.models import CaseSpec
from chain_designer.models import ChainDocument
from chain_designer.models import LLMSpec
from chain_designer.models import SequentialSpec
from chain_designer.session import ChainSpecSession
from chain_designer.spec_editors import edit_llm_spec


def _make_registry() -> LLMRegistry:
    return LLMRegistry.from_mapping(
        {
            "local": {"base_url": "http://localhost:11434/v1", "model_name": "llama3"},
            "gpt": {"model_name": "gpt-test"},
        }
    )


def test_first_insert_creates_root_with_next_id() -> None:
    session = ChainSpecSession()

    root = session.insert("llm_spec", parent_id=12, index=3)

    assert isinstance(root, LLMSpec)
    assert root.chain_id == 0
    assert session.working is root
    assert session.next_chain_id == 1


def test_insert_under_leaf_root_fails_without_side_effects() -> None:
    session = ChainSpecSession()
    root = session.insert("llm_spec")

    with pytest.raises(InvalidInsertTargetError):
        session.insert("llm_spec", parent_id=0, index=0)

    assert session.working is root
    assert session.next_chain_id == 1


def test_allocator_advances_by_one_per_insert() -> None:
    session = ChainSpecSession()
    session.insert("sequential_spec")

    first = session.insert("llm_spec", parent_id=0, index=0)
    second = session.insert("api_spec", parent_id=0, index=1)
    third = session.insert("case_spec", parent_id=0, index=0)

    assert [first.chain_id, second.chain_id, third.chain_id] == [1, 2, 3]
    assert session.next_chain_id == 4
    assert isinstance(session.working, SequentialSpec)
    assert [chain.chain_id for chain in session.working.chains] == [3, 1, 2]


def test_edits_only_touch_working_tree() -> None:
    session = ChainSpecSession()
    session.insert("sequential_spec")

    assert session.committed is None
    assert session.is_clean is False
    assert session.ready_to_interact is False

    session.commit(revision="r1")

    assert session.is_clean is True
    assert session.ready_to_interact is True
    assert session.revision == "r1"

    session.insert("llm_spec", parent_id=0, index=0)

    assert session.is_clean is False
    assert isinstance(session.committed, SequentialSpec)
    assert session.committed.chains == []


def test_update_replaces_node_and_tracks_dirty_state() -> None:
    session = ChainSpecSession()
    session.insert("sequential_spec")
    session.insert("llm_spec", parent_id=0, index=0)
    session.commit()
    original = session.get(1)
    assert isinstance(original, LLMSpec)

    session.update(edit_llm_spec(original, prompt="Tell me about {topic}"))

    updated = session.get(1)
    assert isinstance(updated, LLMSpec)
    assert updated.input_keys == ["topic"]
    assert session.is_clean is False

    session.update(original)

    assert session.is_clean is True


def test_update_absent_id_raises() -> None:
    session = ChainSpecSession()
    root = session.insert("sequential_spec")

    with pytest.raises(NodeNotFoundError) as exc_info:
        session.update(LLMSpec(chain_id=7))

    assert exc_info.value.chain_id == 7
    assert session.working is root


def test_update_rejects_duplicate_ids() -> None:
    session = ChainSpecSession()
    session.insert("sequential_spec")
    session.insert("llm_spec", parent_id=0, index=0)
    session.insert("case_spec", parent_id=0, index=1)
    before = session.working

    with pytest.raises(DuplicateChainIdError):
        session.update(CaseSpec(chain_id=2, cases={"dup": LLMSpec(chain_id=1)}))

    assert session.working is before


def test_get_and_find() -> None:
    session = ChainSpecSession()
    session.insert("case_spec")
    session.insert("llm_spec", parent_id=0, index=0)

    assert session.find(1) is not None
    assert session.find(5) is None
    with pytest.raises(NodeNotFoundError):
        session.get(5)


def test_revert_discards_edits() -> None:
    session = ChainSpecSession()
    session.insert("sequential_spec")
    session.commit()
    session.insert("llm_spec", parent_id=0, index=0)

    session.revert()

    assert session.is_clean is True
    assert session.working is session.committed


def test_require_clean_gate() -> None:
    session = ChainSpecSession()

    with pytest.raises(DirtySessionError):
        session.require_clean()

    root = session.insert("sequential_spec")
    session.commit()
    assert session.require_clean() is root

    session.insert("api_spec", parent_id=0, index=0)
    with pytest.raises(DirtySessionError):
        session.require_clean()


def test_load_reseeds_allocator() -> None:
    tree = SequentialSpec(chain_id=0, chains=[LLMSpec(chain_id=5), LLMSpec(chain_id=2)])
    session = ChainSpecSession()

    session.load(tree, name="demo", revision="abc")
    new_spec = session.insert("llm_spec", parent_id=0, index=2)

    assert new_spec.chain_id == 6
    assert session.name == "demo"
    assert session.revision == "abc"


def test_load_rejects_duplicate_ids() -> None:
    tree = SequentialSpec(chain_id=0, chains=[LLMSpec(chain_id=1), LLMSpec(chain_id=1)])

    with pytest.raises(DuplicateChainIdError) as exc_info:
        ChainSpecSession().load(tree)

    assert exc_info.value.chain_ids == [1]


def test_document_round_trip() -> None:
    document = ChainDocument(name="demo", revision="r3", chain=SequentialSpec(chain_id=0))

    session = ChainSpecSession.from_document(document)

    assert session.ready_to_interact is True
    assert session.to_document() == document


def test_registry_supplies_default_llm_key() -> None:
    session = ChainSpecSession(_make_registry())

    root = session.insert("llm_spec")

    assert isinstance(root, LLMSpec)
    assert root.llm_key == "gpt"


def test_update_with_unregistered_llm_key_fails() -> None:
    session = ChainSpecSession(_make_registry())
    root = session.insert("llm_spec")
    assert isinstance(root, LLMSpec)

    session.update(edit_llm_spec(root, llm_key="local"))
    with pytest.raises(UnknownLLMError):
        session.update(edit_llm_spec(root, llm_key="missing"))

    current = session.get(0)
    assert isinstance(current, LLMSpec)
    assert current.llm_key == "local"


def test_insert_under_default_case_keeps_case_labelled_default() -> None:
    tree = SequentialSpec(
        chain_id=0,
        chains=[
            CaseSpec(
                chain_id=1,
                cases={"_default": LLMSpec(chain_id=2)},
                default_case=SequentialSpec(chain_id=3),
            )
        ],
    )
    session = ChainSpecSession()
    session.load(tree)

    new_spec = session.insert("llm_spec", parent_id=3, index=0)

    assert new_spec.chain_id == 4
    assert session.find(2) is not None
