"""YAML / JSON loading with a source line index.

The document is composed once with PyYAML; the node tree gives us source
positions and the constructed object graph is what rules inspect.
JSON is a subset of YAML, so both formats go through the same path.
"""

import logging
from pathlib import Path
from typing import Any, NamedTuple

import yaml

from api_lint.errors import DocumentError

logger = logging.getLogger(__name__)

LineIndex = dict[tuple[str, ...], int]


class LoadedDocument(NamedTuple):
    data: Any
    lines: LineIndex


def load_text(text: str) -> LoadedDocument:
    """Parse YAML/JSON text into an object graph plus a pointer -> line index."""
    loader = yaml.SafeLoader(text)
    try:
        node = loader.get_single_node()
        data = loader.construct_document(node) if node is not None else None
    except yaml.YAMLError as e:
        raise DocumentError(f"Cannot parse API description: {e}") from e
    finally:
        loader.dispose()

    lines: LineIndex = {}
    if node is not None:
        _index_lines(node, (), node.start_mark.line + 1, lines, set())
    logger.debug("Loaded document with %d indexed nodes", len(lines))
    return LoadedDocument(data=data, lines=lines)


def load_file(file_path: Path) -> LoadedDocument:
    """Read and parse an API description file."""
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentError(f"Cannot read {file_path}: {e}") from e
    return load_text(text)


def _index_lines(node: yaml.Node, tokens: tuple[str, ...], line: int, lines: LineIndex, seen: set[int]) -> None:
    # Mapping entries are reported at the line of their key. Aliased nodes
    # are descended into once only, at their first occurrence.
    lines.setdefault(tokens, line)
    if id(node) in seen:
        return
    seen.add(id(node))
    if isinstance(node, yaml.MappingNode):
        for key_node, value_node in node.value:
            if not isinstance(key_node, yaml.ScalarNode) or key_node.tag == "tag:yaml.org,2002:merge":
                continue
            _index_lines(value_node, tokens + (key_node.value,), key_node.start_mark.line + 1, lines, seen)
    elif isinstance(node, yaml.SequenceNode):
        for i, item in enumerate(node.value):
            _index_lines(item, tokens + (str(i),), item.start_mark.line + 1, lines, seen)
