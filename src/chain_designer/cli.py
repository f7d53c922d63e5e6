"""CLI entrypoint."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from chain_designer.chain_file import LoadedChainFile
from chain_designer.dependencies import extract_inputs
from chain_designer.llm_registry import LLMRegistry
from chain_designer.models.chain_document import ChainDocument
from chain_designer.models.chain_spec import CHAIN_TYPES
from chain_designer.session import ChainSpecSession
from chain_designer.tree import iter_chain_specs


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chain-designer")
    parser.add_argument("--llms-dir", type=str, default="llms", help="Directory of LLM backend YAML files")
    subparsers = parser.add_subparsers(dest="command", required=True)

    inputs_parser = subparsers.add_parser("inputs", help="List the input keys a template requires")
    inputs_parser.add_argument("template", type=str)
    inputs_parser.add_argument("--preview", action="store_true", help="Also print the highlighted HTML preview")

    subparsers.add_parser("llms", help="List registered LLM backends")

    show_parser = subparsers.add_parser("show", help="List the nodes of a chain file")
    show_parser.add_argument("chain_file", type=str)

    insert_parser = subparsers.add_parser("insert", help="Insert a node into a chain file")
    insert_parser.add_argument("chain_file", type=str)
    insert_parser.add_argument("--type", dest="chain_type", choices=CHAIN_TYPES, required=True)
    insert_parser.add_argument("--parent", type=int, default=0)
    insert_parser.add_argument("--index", type=int, default=0)
    return parser


def _load_or_empty(path: Path) -> LoadedChainFile:
    if path.exists():
        return LoadedChainFile(path)
    return LoadedChainFile.from_parts(document=ChainDocument(name=path.stem))


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.command == "inputs":
        input_keys, rendered = extract_inputs(args.template)
        print(json.dumps(input_keys))
        if args.preview:
            print(rendered)
        return

    if args.command == "llms":
        for llm_key, label in LLMRegistry([Path(args.llms_dir)]).labels().items():
            print(f"{llm_key}\t{label}")
        return

    chain_path = Path(args.chain_file)
    if args.command == "show":
        loaded = LoadedChainFile(chain_path)
        for spec in iter_chain_specs(loaded.document.chain):
            input_keys = ",".join(getattr(spec, "input_keys", []))
            output_key = getattr(spec, "output_key", "")
            print(f"{spec.chain_id}\t{spec.chain_type}\t{input_keys}\t{output_key}")
        return

    loaded = _load_or_empty(chain_path)
    session = ChainSpecSession.from_document(loaded.document, LLMRegistry([Path(args.llms_dir)]))
    new_spec = session.insert(args.chain_type, args.parent, args.index)
    session.commit()
    LoadedChainFile.from_parts(document=session.to_document(), description=loaded.description).write(chain_path)
    print(new_spec.model_dump_json(indent=2))
