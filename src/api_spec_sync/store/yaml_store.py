"""YAML-backed store for API specifications.

Reads OpenAPI 3.x documents (YAML or JSON) into ApiSpecification and writes
them back as block-style YAML. Saving goes through a temporary file so a
reader never sees a half-written document.
"""

import logging
import os
import tempfile
from pathlib import Path

import yaml
from pydantic import ValidationError

from api_spec_sync.model.base import ApiSpecification

logger = logging.getLogger(__name__)


class SpecStoreError(Exception):
    """Raised when a stored document cannot be read or validated."""


def parse_spec(text: str, source: str = "<string>") -> ApiSpecification | None:
    """Parse document text. Returns None for an empty document."""
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SpecStoreError(f"{source}: invalid YAML: {e}") from e

    if doc is None:
        return None
    if not isinstance(doc, dict):
        raise SpecStoreError(f"{source}: expected a mapping at the top level, got {type(doc).__name__}")

    try:
        return ApiSpecification.model_validate(doc)
    except ValidationError as e:
        raise SpecStoreError(f"{source}: not a valid API specification: {e}") from e


def load_spec(file_path: Path) -> ApiSpecification | None:
    """Load a specification file. A missing or empty file gives None."""
    if not file_path.exists():
        logger.info("No specification at %s", file_path)
        return None
    text = file_path.read_text(encoding="utf-8")
    spec = parse_spec(text, source=str(file_path))
    if spec is not None:
        logger.debug("Loaded %s (%d paths)", file_path, len(spec.paths or {}))
    return spec


def to_document(spec: ApiSpecification) -> dict:
    return spec.model_dump(by_alias=True, exclude_none=True, mode="json")


def dump_spec(spec: ApiSpecification) -> str:
    return yaml.safe_dump(
        to_document(spec),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        indent=2,
    )


def save_spec(spec: ApiSpecification, file_path: Path) -> None:
    """Write the specification atomically."""
    text = dump_spec(spec)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, file_path)
    except OSError:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    logger.debug("Wrote %s", file_path)
