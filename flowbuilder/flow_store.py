import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, List, Optional

from flowbuilder.canvas.graph_store import NodeKind

logger = logging.getLogger(__name__)


def _slugify(name: str) -> str:
    slug = re.sub(r'[^a-z0-9_-]+', '-', name.strip().lower()).strip('-')
    return slug or 'untitled'


def _snapshot_problem(data: Dict[str, Any]) -> Optional[str]:
    """Describe the first entry GraphStore.load_dict could not use, or None."""
    kinds = {kind.value for kind in NodeKind}
    for i, raw in enumerate(data["nodes"]):
        if not isinstance(raw, dict) or "id" not in raw:
            return f"node {i} is not an object with an id"
        if not isinstance(raw.get("type"), str) or raw["type"] not in kinds:
            return f"node {raw['id']} has unknown type {raw.get('type')!r}"
        if not all(isinstance(raw.get(axis, 0.0), (int, float)) for axis in ("x", "y")):
            return f"node {raw['id']} has a non-numeric position"
        if not isinstance(raw.get("data") or {}, dict):
            return f"node {raw['id']} data is not an object"
    connections = data["connections"]
    if not isinstance(connections, list):
        return "connections is not a list"
    for i, raw in enumerate(connections):
        if not isinstance(raw, dict) or "sourceId" not in raw or "targetId" not in raw:
            return f"connection {i} has no sourceId/targetId"
    return None


class FlowStore:
    """
    Saves and loads flow snapshots.

    Structure:
    - {flows_dir}/{slug}.json: one file per flow, holding the snapshot
      produced by GraphStore.to_dict() plus a name and save timestamp.

    The canvas never touches disk; the Save Flow action hands its snapshot here.
    """

    def __init__(self, flows_dir: str = "flows"):
        self.flows_dir = Path(flows_dir)
        self.flows_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, name: str) -> Path:
        return self.flows_dir / f"{_slugify(name)}.json"

    def save(self, name: str, snapshot: Dict[str, Any]) -> Path:
        """Write a flow snapshot. OSError propagates to the caller."""
        path = self._path_for(name)
        payload = {
            "name": name,
            "saved_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "nodes": snapshot.get("nodes", []),
            "connections": snapshot.get("connections", []),
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        logger.info(f"Saved flow '{name}' to {path} ({len(payload['nodes'])} nodes)")
        return path

    def load(self, name: str) -> Optional[Dict[str, Any]]:
        """Load a flow snapshot, or None when missing, unreadable or malformed."""
        path = self._path_for(name)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load flow file {path}: {e}")
            return None
        if not isinstance(data, dict) or not isinstance(data.get("nodes"), list):
            logger.warning(f"Flow file {path} has no node list")
            return None
        data.setdefault("connections", [])
        problem = _snapshot_problem(data)
        if problem:
            logger.warning(f"Flow file {path} is malformed: {problem}")
            return None
        return data

    def list_flows(self) -> List[str]:
        """Return saved flow slugs."""
        return sorted(f.stem for f in self.flows_dir.glob("*.json"))

    def delete(self, name: str) -> bool:
        path = self._path_for(name)
        if not path.exists():
            return False
        path.unlink()
        return True
