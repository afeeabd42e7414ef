"""Device descriptors shared by platform drivers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class DeviceInfo:
    """A connected device or booted simulator."""

    id: str
    name: str
    type: str
    state: str = "booted"

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "type": self.type, "state": self.state}
