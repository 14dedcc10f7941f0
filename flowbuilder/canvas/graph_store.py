"""
Graph Store - owns the flow's nodes and connections.

Structure lives in a NetworkX MultiDiGraph: graph nodes are flow node ids
carrying a Node snapshot, graph edges are keyed by connection id. Removing
a graph node drops its incident edges, so deleting a flow node cascades to
its connections in the same step.

Lookups by unknown id never raise. They return None/False and the caller
skips that unit of work.
"""

import logging
import random
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

import networkx as nx

from flowbuilder.canvas.constants import NEW_NODE_OFFSET, NEW_NODE_JITTER
from flowbuilder.canvas.transform import Point

logger = logging.getLogger(__name__)


class NodeKind(str, Enum):
    """Node kinds offered by the palette."""
    TRIGGER = 'trigger'
    MESSAGE = 'message'
    CONDITION = 'condition'
    ACTION = 'action'

    @property
    def accepts_incoming(self) -> bool:
        """Triggers start a flow and have no input handle."""
        return self is not NodeKind.TRIGGER

    @property
    def allows_outgoing(self) -> bool:
        """Actions end a flow and have no output handle."""
        return self is not NodeKind.ACTION

    @property
    def default_label(self) -> str:
        return f"New {self.value.capitalize()}"


@dataclass(frozen=True)
class Node:
    """Snapshot of a flow node. `data` is opaque to the canvas."""
    id: str
    kind: NodeKind
    label: str
    position: Point
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Connection:
    id: str
    source_id: str
    target_id: str


def _new_id() -> str:
    return str(uuid.uuid4())


class GraphStore:
    """
    Node and connection storage with referential integrity.

    Tracks the selected node so that deleting it clears the selection in
    the same operation.
    """

    def __init__(self, rng: Optional[random.Random] = None,
                 id_factory: Callable[[], str] = _new_id):
        self._graph = nx.MultiDiGraph()
        self._rng = rng or random.Random()
        self._new_id = id_factory
        self._selected_id: Optional[str] = None

    @property
    def graph(self) -> nx.MultiDiGraph:
        """Access the underlying NetworkX graph"""
        return self._graph

    @property
    def nodes(self) -> List[Node]:
        return [attrs['node'] for _, attrs in self._graph.nodes(data=True) if attrs.get('node') is not None]

    @property
    def connections(self) -> List[Connection]:
        return [attrs['connection'] for _, _, attrs in self._graph.edges(data=True)]

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    def get_node(self, node_id: str) -> Optional[Node]:
        if node_id is None or node_id not in self._graph:
            return None
        return self._graph.nodes[node_id].get('node')

    def get_connection(self, connection_id: str) -> Optional[Connection]:
        for conn in self.connections:
            if conn.id == connection_id:
                return conn
        return None

    def incident_connections(self, node_id: str) -> List[Connection]:
        """Connections that use node_id as source or target."""
        if node_id not in self._graph:
            return []
        edges = list(self._graph.in_edges(node_id, data=True)) + list(self._graph.out_edges(node_id, data=True))
        # A self connection appears in both lists
        seen = {}
        for _, _, attrs in edges:
            seen[attrs['connection'].id] = attrs['connection']
        return list(seen.values())

    # --- Node mutations ---

    def add_node(self, kind: Union[NodeKind, str], center: Point,
                 label: Optional[str] = None, data: Optional[Dict[str, Any]] = None) -> Node:
        """
        Create a node near `center` (world space) and select it.

        The position is offset from the center and jittered independently on
        each axis so repeated additions do not stack exactly.
        """
        kind = NodeKind(kind)
        position = (
            center[0] + NEW_NODE_OFFSET[0] + self._rng.random() * NEW_NODE_JITTER,
            center[1] + NEW_NODE_OFFSET[1] + self._rng.random() * NEW_NODE_JITTER,
        )
        node = Node(
            id=self._new_id(),
            kind=kind,
            label=label if label is not None else kind.default_label,
            position=position,
            data=dict(data or {}),
        )
        self.insert_node(node)
        self._selected_id = node.id
        logger.info(f"Added {kind.value} node {node.id[:8]} at ({position[0]:.1f}, {position[1]:.1f})")
        return node

    def insert_node(self, node: Node) -> Node:
        """Insert a fully specified node (used when loading or seeding)."""
        self._graph.add_node(node.id, node=node)
        return node

    def update_node_position(self, node_id: str, position: Point) -> bool:
        node = self.get_node(node_id)
        if node is None:
            return False
        self._graph.nodes[node_id]['node'] = replace(node, position=(float(position[0]), float(position[1])))
        return True

    def rename_node(self, node_id: str, label: str) -> bool:
        node = self.get_node(node_id)
        if node is None:
            return False
        self._graph.nodes[node_id]['node'] = replace(node, label=label)
        return True

    def delete_node(self, node_id: str) -> bool:
        """Delete a node, every connection touching it, and its selection."""
        if node_id not in self._graph:
            return False
        dropped = len(self.incident_connections(node_id))
        self._graph.remove_node(node_id)
        if self._selected_id == node_id:
            self._selected_id = None
        logger.info(f"Deleted node {node_id[:8]} and {dropped} connection(s)")
        return True

    def select(self, node_id: Optional[str]) -> bool:
        """Select a live node, or clear the selection with None."""
        if node_id is not None and self.get_node(node_id) is None:
            return False
        self._selected_id = node_id
        return True

    # --- Connection mutations ---

    def add_connection(self, source_id: str, target_id: str,
                       connection_id: Optional[str] = None) -> Optional[Connection]:
        """
        Connect source's output handle to target's input handle.

        Returns None when an endpoint is missing or the kinds have no
        matching handles (action has no output, trigger has no input).
        A connection_id already in use is replaced with a fresh one.
        """
        source = self.get_node(source_id)
        target = self.get_node(target_id)
        if source is None or target is None:
            logger.warning(f"Connection skipped: missing endpoint {source_id} -> {target_id}")
            return None
        if not source.kind.allows_outgoing or not target.kind.accepts_incoming:
            logger.warning(f"Connection skipped: {source.kind.value} -> {target.kind.value} has no handles")
            return None

        if connection_id and self.get_connection(connection_id) is not None:
            logger.warning(f"Connection id {connection_id} already in use, assigning a new one")
            connection_id = None

        conn = Connection(id=connection_id or self._new_id(), source_id=source_id, target_id=target_id)
        self._graph.add_edge(source_id, target_id, key=conn.id, connection=conn)
        return conn

    def remove_connection(self, connection_id: str) -> bool:
        conn = self.get_connection(connection_id)
        if conn is None:
            return False
        self._graph.remove_edge(conn.source_id, conn.target_id, key=conn.id)
        return True

    def clear(self) -> None:
        self._graph.clear()
        self._selected_id = None

    # --- Snapshots ---

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data snapshot for an external persistence layer."""
        return {
            'nodes': [
                {
                    'id': n.id,
                    'type': n.kind.value,
                    'label': n.label,
                    'x': n.position[0],
                    'y': n.position[1],
                    'data': dict(n.data),
                }
                for n in self.nodes
            ],
            'connections': [
                {'id': c.id, 'sourceId': c.source_id, 'targetId': c.target_id}
                for c in self.connections
            ],
        }

    def load_dict(self, payload: Dict[str, Any]) -> None:
        """
        Replace the graph with a to_dict() snapshot.

        Connections whose endpoints are not in the snapshot are dropped.
        The whole snapshot is parsed before the graph is touched, so a bad
        entry raises and leaves the current graph as it was.
        """
        nodes = [
            Node(
                id=str(raw['id']),
                kind=NodeKind(raw['type']),
                label=raw.get('label', ''),
                position=(float(raw.get('x', 0.0)), float(raw.get('y', 0.0))),
                data=dict(raw.get('data') or {}),
            )
            for raw in payload.get('nodes', [])
        ]
        connections = [
            (str(raw['sourceId']), str(raw['targetId']), raw.get('id'))
            for raw in payload.get('connections', [])
        ]

        self.clear()
        for node in nodes:
            self.insert_node(node)
        for source_id, target_id, connection_id in connections:
            self.add_connection(source_id, target_id, connection_id=connection_id)

    def seed_demo_flow(self) -> None:
        """Populate the starter flow: a trigger wired to a welcome message."""
        self.clear()
        self.insert_node(Node(id='1', kind=NodeKind.TRIGGER, label='Start Flow', position=(100.0, 300.0)))
        self.insert_node(Node(id='2', kind=NodeKind.MESSAGE, label='Welcome Message', position=(400.0, 300.0)))
        self.add_connection('1', '2', connection_id='c1')
