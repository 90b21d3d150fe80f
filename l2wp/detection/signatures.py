"""Loading the functionality signature table.

The table ships as ``l2wp/data/signatures.yaml``. A JSON file with the
same ``functionality_mappings`` layout is accepted too, which keeps
older ``plugin-mappings.json`` exports usable via
``detection.signatures_path``.
"""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Optional, Union

import yaml

from l2wp.errors import MalformedInputError

from .models import SignatureEntry, SignatureMapping

logger = logging.getLogger("l2wp.detection.signatures")

PACKAGED_RESOURCE = "signatures.yaml"
ROOT_KEY = "functionality_mappings"


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses duplicate mapping keys."""


def _construct_unique_mapping(loader: _UniqueKeyLoader, node: yaml.MappingNode, deep: bool = False) -> dict:
    seen = set()
    for key_node, _ in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in seen:
            raise yaml.constructor.ConstructorError(
                "while constructing a mapping", node.start_mark,
                f"found duplicate key {key!r}", key_node.start_mark,
            )
        seen.add(key)
    return loader.construct_mapping(node, deep=deep)


_UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_unique_mapping
)


def _reject_duplicate_pairs(pairs: list[tuple[str, object]]) -> dict:
    result = {}
    for key, value in pairs:
        if key in result:
            raise ValueError(f"duplicate key {key!r}")
        result[key] = value
    return result


def parse_signatures(data: object) -> SignatureMapping:
    """Build a SignatureMapping from decoded table data."""
    if not isinstance(data, dict):
        return {}
    table = data.get(ROOT_KEY) or {}
    if not isinstance(table, dict):
        logger.warning("'%s' is not a mapping, using an empty table", ROOT_KEY)
        return {}
    mapping: SignatureMapping = {}
    for key, entry in table.items():
        if not isinstance(entry, dict):
            logger.warning("Skipping malformed signature entry %r", key)
            continue
        solutions = entry.get("recommended_solutions") or []
        if not isinstance(solutions, list):
            logger.warning("Ignoring solutions of %r: not a list", key)
            solutions = []
        kept = []
        for solution in solutions:
            if not isinstance(solution, dict) or not solution.get("slug"):
                logger.warning("Skipping solution without a slug in %r", key)
                continue
            kept.append(solution)
        try:
            mapping[str(key)] = SignatureEntry.from_dict(str(key), {**entry, "recommended_solutions": kept})
        except (TypeError, ValueError) as e:
            logger.warning("Skipping malformed signature entry %r: %s", key, e)
    return mapping


def _read_packaged() -> Optional[str]:
    resource = resources.files("l2wp.data").joinpath(PACKAGED_RESOURCE)
    if not resource.is_file():
        return None
    return resource.read_text(encoding="utf-8")


def load_signatures(path: Optional[Union[str, Path]] = None) -> SignatureMapping:
    """Load the signature table from ``path`` or the packaged resource.

    A missing file yields an empty mapping: detection and recommendation
    then simply report nothing.

    Raises:
        MalformedInputError: the file exists but cannot be decoded, or
            declares the same key twice.
    """
    if path is not None:
        path = Path(path)
        if not path.is_file():
            logger.warning("Signature file %s not found, using an empty table", path)
            return {}
        source = path.name
        is_json = path.suffix.lower() == ".json"
    else:
        source = PACKAGED_RESOURCE
        is_json = False

    try:
        if path is not None:
            text = path.read_text(encoding="utf-8")
        else:
            text = _read_packaged()
            if text is None:
                logger.warning("Packaged signature table missing, using an empty table")
                return {}
        if is_json:
            data = json.loads(text, object_pairs_hook=_reject_duplicate_pairs)
        else:
            data = yaml.load(text, Loader=_UniqueKeyLoader)
    except (ValueError, RecursionError) as e:
        raise MalformedInputError.from_exception(e, source=source) from e
    except yaml.YAMLError as e:
        raise MalformedInputError("syntax", source=source, detail=str(e)) from e

    mapping = parse_signatures(data)
    logger.debug("Loaded %d signatures from %s", len(mapping), source)
    return mapping
