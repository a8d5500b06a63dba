"""Destinations for the JSON artifacts written during a batch run."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from sqlmodel import Session

from ..config import Settings
from ..database import get_engine, init_db
from ..models import ArtifactRecord

LOGGER = logging.getLogger(__name__)


class ArtifactSink(Protocol):
    """Narrow "save a named JSON blob" interface used by the batch runner."""

    def save(self, name: str, blob: Any) -> None:
        ...


class DirectoryArtifactSink:
    """Write each artifact as a pretty-printed JSON file under ``directory``."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def save(self, name: str, blob: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / name
        path.write_text(json.dumps(blob, indent=2, ensure_ascii=False, default=str), encoding="utf-8")
        LOGGER.debug("Saved artifact", extra={"artifact": name, "path": str(path)})


class DatabaseArtifactSink:
    """Store artifacts as :class:`ArtifactRecord` rows keyed by batch."""

    def __init__(self, batch_id: str, *, engine=None) -> None:
        self.batch_id = batch_id
        if engine is None:
            init_db()
            engine = get_engine()
        self._engine = engine

    def save(self, name: str, blob: Any) -> None:
        payload = json.loads(json.dumps(blob, default=str))
        with Session(self._engine) as session:
            session.add(ArtifactRecord(batch_id=self.batch_id, name=name, payload=payload))
            session.commit()
        LOGGER.debug("Stored artifact", extra={"artifact": name, "batch_id": self.batch_id})


class NullArtifactSink:
    """Discard artifacts."""

    def save(self, name: str, blob: Any) -> None:
        LOGGER.debug("Discarding artifact", extra={"artifact": name})


def create_sink(settings: Settings, batch_id: str) -> ArtifactSink:
    """Return the sink selected by ``settings.iep_artifact_sink``."""

    if settings.iep_artifact_sink == "database":
        return DatabaseArtifactSink(batch_id)
    if settings.iep_artifact_sink == "none":
        return NullArtifactSink()
    return DirectoryArtifactSink(settings.output_dir / batch_id)


__all__ = [
    "ArtifactSink",
    "DatabaseArtifactSink",
    "DirectoryArtifactSink",
    "NullArtifactSink",
    "create_sink",
]
