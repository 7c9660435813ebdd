"""Document validation.

Checks JSON schema compliance and a couple of structural rules the schema
cannot express before a document reaches the compiler.
"""
from typing import List

import jsonschema

from .schema import DUNGEON_SCHEMA


def validate_document(payload: dict):
    """Validate payload against the dungeon schema. Raises ``jsonschema.ValidationError``."""
    jsonschema.validate(payload, DUNGEON_SCHEMA)
    return True


def document_issues(payload: dict) -> List[str]:
    """Structural problems in a schema-valid document (empty list when fine)."""
    issues: List[str] = []
    cells = {(r["x"], r["y"]) for r in payload["rects"] if r["w"] == 1 and r["h"] == 1}
    door_cells = {(d["x"], d["y"]) for d in payload["doors"]}
    for i, door in enumerate(payload["doors"]):
        if (door["x"], door["y"]) not in cells:
            issues.append(f"Door {i} at ({door['x']}, {door['y']}) has no matching 1x1 rect")
    if not any(not (r["w"] == 1 and r["h"] == 1) or (r["x"], r["y"]) not in door_cells for r in payload["rects"]):
        issues.append("Document has no rooms")
    return issues
