"""Export writer - persists export documents as pretty-printed JSON files."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from .catalog.types import ExportDocument, NodeKind

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def safe_name(name: str) -> str:
    """Replace every non-alphanumeric character with an underscore."""
    return _UNSAFE.sub("_", name)


class ExportWriter:
    """
    Writes documents into ``output_dir``.

    File names are built from the target name, the export method and the
    export timestamp, e.g. ``Finance_GraphQL_2024-01-15T10-20-30-123Z.json``
    or ``Domain_Glossary_GraphQL_...json`` for domain targets. REST exports
    omit the method.
    """

    def __init__(self, output_dir: str | Path = "./exports"):
        self.output_dir = Path(output_dir)

    def filename_for(self, document: ExportDocument) -> str:
        target = document.target
        stamp = (target.exported_at or "").replace(":", "-").replace(".", "-")

        parts = []
        if target.kind is NodeKind.DOMAIN:
            parts.append("Domain")
        parts.append(safe_name(target.name))
        if target.method and target.method != "REST":
            parts.append(target.method)
        if stamp:
            parts.append(stamp)
        return "_".join(parts) + ".json"

    def write(self, document: ExportDocument) -> Path:
        """Write the document and return the file path."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / self.filename_for(document)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(document.to_dict(), f, indent=2, ensure_ascii=False)

        logger.info(f"Wrote export of {document.target.name} to {path}")
        return path

    def list_exports(self) -> list[Path]:
        """Export files already present in the output directory."""
        if not self.output_dir.is_dir():
            return []
        return sorted(self.output_dir.glob("*.json"))
