"""
Light structural check for pulled OpenAPI documents.
"""
from __future__ import annotations

import json
import re
from typing import List

_YAML_VERSION = re.compile(r"""^openapi:\s*["']?(3\.\d+\.\d+)["']?\s*$""", re.MULTILINE)
_YAML_SECTION = "^{}:"
_JSON_VERSION = re.compile(r"^3\.\d+\.\d+$")


class OpenAPISpecCheck:
    """Checks that a document looks like an OpenAPI 3.x spec with info and paths."""

    REQUIRED_SECTIONS = ("info", "paths")

    @classmethod
    def validate(cls, text: str) -> List[str]:
        """
        Returns:
            List of problems (empty if the document looks valid)
        """
        if not text or not text.strip():
            return ["empty document"]

        if text.lstrip().startswith("{"):
            return cls._validate_json(text)

        errors = []
        if not _YAML_VERSION.search(text):
            errors.append("Invalid or missing OpenAPI version. Must be 3.x.x")
        for section in cls.REQUIRED_SECTIONS:
            if not re.search(_YAML_SECTION.format(section), text, re.MULTILINE):
                errors.append(f"Missing '{section}' section")
        return errors

    @classmethod
    def _validate_json(cls, text: str) -> List[str]:
        try:
            spec = json.loads(text)
        except json.JSONDecodeError as e:
            return [f"JSON syntax error: {e}"]
        if not isinstance(spec, dict):
            return ["spec is not an object"]

        errors = []
        if not _JSON_VERSION.match(str(spec.get("openapi", ""))):
            errors.append("Invalid or missing OpenAPI version. Must be 3.x.x")
        for section in cls.REQUIRED_SECTIONS:
            if not spec.get(section):
                errors.append(f"Missing '{section}' section")
        return errors
