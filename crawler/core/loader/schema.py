"""JSON schema definition for One-Page Dungeon documents.

Only the fields the compiler reads are constrained; generator extras
(``version`` metadata, notes ``ref`` labels) are allowed through.
"""

_POINT = {
    "type": "object",
    "required": ["x", "y"],
    "properties": {
        "x": {"type": "number"},
        "y": {"type": "number"},
    },
}

DUNGEON_SCHEMA = {
    "type": "object",
    "required": ["title", "story", "rects", "doors", "notes"],
    "properties": {
        "version": {"type": "string"},
        "title": {"type": "string"},
        "story": {"type": "string"},
        "seed": {"type": ["integer", "null"]},
        "rects": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["x", "y", "w", "h"],
                "properties": {
                    "x": {"type": "integer"},
                    "y": {"type": "integer"},
                    "w": {"type": "integer", "minimum": 1},
                    "h": {"type": "integer", "minimum": 1},
                    "ending": {"type": "boolean"},
                    "rotunda": {"type": "boolean"},
                },
            },
        },
        "doors": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["x", "y", "dir", "type"],
                "properties": {
                    "x": {"type": "integer"},
                    "y": {"type": "integer"},
                    "dir": {
                        "type": "object",
                        "required": ["x", "y"],
                        "properties": {
                            "x": {"type": "integer", "minimum": -1, "maximum": 1},
                            "y": {"type": "integer", "minimum": -1, "maximum": 1},
                        },
                    },
                    "type": {"type": "integer", "minimum": 0},
                },
            },
        },
        "notes": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["text", "pos"],
                "properties": {
                    "text": {"type": "string"},
                    "ref": {"type": "string"},
                    "pos": _POINT,
                },
            },
        },
        "columns": {"type": "array", "items": _POINT},
        "water": {"type": "array", "items": _POINT},
    },
}
