"""
Stored artifact models returned by the storage collaborator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class Artifact:
    """One stored file."""

    id: str
    name: str
    link: str = ""
    parents: List[str] = field(default_factory=list, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "link": self.link}

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Artifact":
        """Create from a storage API file resource."""
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            link=data.get("webViewLink", ""),
            parents=list(data.get("parents", [])),
        )


@dataclass(frozen=True)
class ArtifactPair:
    """
    Processed + original artifacts for one request.

    Only ever built after BOTH uploads succeed.
    """

    processed: Artifact
    original: Artifact

    @property
    def processed_id(self) -> str:
        return self.processed.id

    @property
    def processed_link(self) -> str:
        return self.processed.link

    @property
    def original_id(self) -> str:
        return self.original.id

    @property
    def original_link(self) -> str:
        return self.original.link

    def to_response(self) -> Dict[str, str]:
        """Field names used by the /add-border response."""
        return {
            "fileId": self.processed_id,
            "viewLink": self.processed_link,
            "originalFileId": self.original_id,
            "originalViewLink": self.original_link,
        }
