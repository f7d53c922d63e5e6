"""Chain document files: YAML frontmatter plus a markdown description."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import frontmatter

from chain_designer.models.chain_document import ChainDocument

logger = logging.getLogger(__name__)


@dataclass
class LoadedChainFile:
    document: ChainDocument
    description: str

    def __init__(self, chain_file: Path | str) -> None:
        post, source_label = load_chain_frontmatter(chain_file)
        ignored = sorted(set(post.metadata) - set(ChainDocument.model_fields))
        if ignored:
            logger.warning("Ignored keys %s in %s", ", ".join(ignored), source_label)
        self.document = ChainDocument.model_validate(post.metadata)
        self.description = post.content.strip()

    @classmethod
    def from_parts(cls, *, document: ChainDocument, description: str = "") -> "LoadedChainFile":
        obj = cls.__new__(cls)
        obj.document = document
        obj.description = description
        return obj

    def dumps(self) -> str:
        metadata = self.document.model_dump(mode="json")
        post = frontmatter.Post(self.description, **metadata)
        return frontmatter.dumps(post, sort_keys=False) + "\n"

    def write(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.dumps(), encoding="utf-8")
        return path


def load_chain_frontmatter(chain_file: Path | str) -> tuple[frontmatter.Post, str]:
    if isinstance(chain_file, Path):
        post = frontmatter.load(str(chain_file))
        return post, str(chain_file)
    chain_path = Path(chain_file)
    if "\n" not in chain_file and chain_path.exists():
        post = frontmatter.load(str(chain_path))
        return post, str(chain_path)
    post = frontmatter.loads(chain_file)
    return post, "<inline>"
