"""Session data models."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime

from stagcompose.editor import CompositionEditor


@dataclass
class EditorSession:
    """One client's editor with its bookkeeping."""

    id: str
    editor: CompositionEditor
    created_at: datetime = field(default_factory=datetime.now)
    last_activity: datetime = field(default_factory=datetime.now)
    # Serializes mutations coming from concurrent requests
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def update_activity(self) -> None:
        """Mark the session as recently used."""
        self.last_activity = datetime.now()

    def to_summary(self) -> dict:
        """Get summary dict for API response."""
        return {
            "id": self.id,
            "width": self.editor.width,
            "height": self.editor.height,
            "layer_count": len(self.editor.stack),
            "created_at": self.created_at.isoformat(),
            "last_activity": self.last_activity.isoformat(),
        }

    def to_detail(self) -> dict:
        """Get detailed dict for API response."""
        return {
            **self.to_summary(),
            **self.editor.to_api_dict(),
        }
