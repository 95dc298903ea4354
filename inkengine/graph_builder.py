"""
inkengine/graph_builder.py -- In-Memory Entity-Connection Graph (NetworkX)

Holds every typed connection between a project's entities as a directed
multigraph.  Nodes are compound ``(entity_type, entity_id)`` keys, since ids
are only unique within one entity type.  Parallel edges are keyed by
connection type, so two characters can be both ``friend`` and ``rival``
but the same typed edge is stored once.

Usage:
    from inkengine.graph_builder import ConnectionGraph

    cg = ConnectionGraph.from_project(project)
    cg.get_character_connections(1)
    cg.get_entity_network("location", 4, depth=2)
    cg.find_connection_path("character", 1, "lore", 9)
"""

from __future__ import annotations

import logging
from itertools import count
from typing import TYPE_CHECKING, Iterable, Optional

import networkx as nx

from inkengine.connections import validate_connection_type
from inkengine.errors import InkEngineError, ValidationError
from inkengine.models.base import (
    ENTITY_TYPES,
    Entity,
    EntityConnection,
    RelationshipRow,
)

if TYPE_CHECKING:
    from inkengine.project import ProjectData

logger = logging.getLogger(__name__)

NodeKey = tuple[str, int]


# ---------------------------------------------------------------------------
# ConnectionGraph
# ---------------------------------------------------------------------------

class ConnectionGraph:
    """Directed multigraph of entity connections.

    Every edge stores the ``EntityConnection`` it was built from plus an
    insertion sequence number, so query results come back in the order the
    connections were added.
    """

    def __init__(self):
        self.graph: nx.MultiDiGraph = nx.MultiDiGraph()
        self._seq = count()

    def __len__(self) -> int:
        return self.graph.number_of_edges()

    def __contains__(self, node: NodeKey) -> bool:
        return node in self.graph

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_project(cls, project: "ProjectData") -> "ConnectionGraph":
        """Build a graph from a loaded project snapshot.

        Entities become named nodes; relationship-table rows and authored
        connections become edges.  Edges whose connection type is not
        permitted for their entity pair are skipped with a warning rather
        than failing the whole load.
        """
        cg = cls()
        cg.add_entities(project.iter_entities())

        edges = [row.to_connection() for row in project.iter_relationship_rows()]
        edges.extend(project.connections)
        for connection in edges:
            try:
                cg.add_connection(connection)
            except ValidationError as exc:
                logger.warning(
                    "Skipping connection %s:%s -> %s:%s: %s",
                    connection.source_type, connection.source_id,
                    connection.target_type, connection.target_id, exc,
                )

        logger.info(
            "Built connection graph: %d entities, %d connections",
            cg.graph.number_of_nodes(), cg.graph.number_of_edges(),
        )
        return cg

    def add_entity(self, entity_type: str, entity_id: int, name: str = "") -> None:
        """Add (or rename) an entity node.

        Raises
        ------
        ValidationError
            If *entity_type* is not a known entity variant.
        """
        if entity_type not in ENTITY_TYPES:
            raise ValidationError("entityType", list(ENTITY_TYPES), entity_type)
        key = (entity_type, entity_id)
        if key in self.graph:
            if name:
                self.graph.nodes[key]["name"] = name
            return
        self.graph.add_node(key, entity_type=entity_type, entity_id=entity_id, name=name)

    def add_entities(self, entities: Iterable[Entity]) -> int:
        """Add a node for every entity that has an id.  Returns the count added."""
        added = 0
        for entity in entities:
            if entity.id is None:
                logger.debug("Ignoring %s without an id", entity.entity_type)
                continue
            self.add_entity(entity.entity_type, entity.id, entity.display_title)
            added += 1
        return added

    def add_connection(self, connection: EntityConnection) -> bool:
        """Store a connection as an edge.

        Endpoints that are not yet in the graph are added as stub nodes
        named after the connection's display names.

        Returns
        -------
        bool
            ``True`` if the edge is new, ``False`` if an edge of the same
            type between the same endpoints already existed.

        Raises
        ------
        ValidationError
            If the connection type is not permitted for the entity pair.
        """
        validate_connection_type(
            connection.source_type, connection.target_type, connection.connection_type,
        )
        source, target = connection.source_key, connection.target_key
        self.add_entity(*source, name=connection.source_name or "")
        self.add_entity(*target, name=connection.target_name or "")

        if self.graph.has_edge(source, target, key=connection.connection_type):
            return False

        self.graph.add_edge(
            source,
            target,
            key=connection.connection_type,
            connection=connection,
            seq=next(self._seq),
        )
        return True

    def add_relationship_rows(self, rows: Iterable[RelationshipRow]) -> int:
        """Convert relationship-table rows to connections and add them."""
        return sum(1 for row in rows if self.add_connection(row.to_connection()))

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def remove_connection(self, connection: EntityConnection) -> bool:
        """Remove one typed edge.  Returns ``False`` if it was not present."""
        source, target = connection.source_key, connection.target_key
        if not self.graph.has_edge(source, target, key=connection.connection_type):
            return False
        self.graph.remove_edge(source, target, key=connection.connection_type)
        return True

    def remove_entity(self, entity_type: str, entity_id: int) -> int:
        """Remove an entity and every connection touching it.

        Connections never outlive either endpoint.  Silently does nothing
        if the entity is not in the graph.

        Returns
        -------
        int
            The number of connections removed.
        """
        key = (entity_type, entity_id)
        if key not in self.graph:
            return 0
        removed = len(self._incident_edges(key))
        self.graph.remove_node(key)
        return removed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def connections(self) -> list[EntityConnection]:
        """Every connection, in insertion order."""
        edges = sorted(self.graph.edges(keys=True, data=True), key=lambda e: e[3]["seq"])
        return [self._to_connection(u, v, data) for u, v, _, data in edges]

    def get_character_connections(self, character_id: int) -> list[EntityConnection]:
        """All connections of a character: outgoing first, then incoming."""
        key = ("character", character_id)
        if key not in self.graph:
            return []

        outgoing = sorted(self.graph.out_edges(key, keys=True, data=True), key=lambda e: e[3]["seq"])
        incoming = sorted(self.graph.in_edges(key, keys=True, data=True), key=lambda e: e[3]["seq"])

        result: list[EntityConnection] = []
        seen: set[int] = set()
        for u, v, _, data in outgoing + incoming:
            if data["seq"] in seen:  # self-loops show up in both lists
                continue
            seen.add(data["seq"])
            result.append(self._to_connection(u, v, data))
        return result

    def get_entity_network(
        self, entity_type: str, entity_id: int, depth: int = 1,
    ) -> list[EntityConnection]:
        """Return the connections within *depth* hops of an entity.

        Breadth-first over both edge directions.  ``depth=1`` returns the
        entity's own connections; ``depth=2`` adds the connections of its
        neighbours, and so on.

        Parameters
        ----------
        entity_type : str
            Type of the starting entity.
        entity_id : int
            Id of the starting entity.
        depth : int
            Number of hops to expand.  Values below 1 return ``[]``.

        Returns
        -------
        list[EntityConnection]
            Each connection once, in discovery order.  Returns an empty list
            if the entity is not in the graph.
        """
        start = (entity_type, entity_id)
        if start not in self.graph or depth < 1:
            return []

        visited: set[NodeKey] = {start}
        frontier: list[NodeKey] = [start]
        seen_edges: set[int] = set()
        result: list[EntityConnection] = []

        for _ in range(depth):
            next_frontier: list[NodeKey] = []
            for node in frontier:
                for u, v, data in self._incident_edges(node):
                    if data["seq"] not in seen_edges:
                        seen_edges.add(data["seq"])
                        result.append(self._to_connection(u, v, data))
                    other = v if u == node else u
                    if other not in visited:
                        visited.add(other)
                        next_frontier.append(other)
            frontier = next_frontier
            if not frontier:
                break

        return result

    def find_connection_path(
        self,
        source_type: str,
        source_id: int,
        target_type: str,
        target_id: int,
    ) -> list[EntityConnection]:
        """Find the shortest chain of connections between two entities.

        Edge direction is ignored while searching, so a path may follow a
        connection backwards; each returned connection keeps its stored
        direction.

        Returns
        -------
        list[EntityConnection]
            The connections along the path, from the source side to the
            target side.  Empty if either entity is missing, they are the
            same entity, or no path exists.
        """
        source = (source_type, source_id)
        target = (target_type, target_id)
        if source not in self.graph or target not in self.graph or source == target:
            return []

        undirected = self.graph.to_undirected(as_view=True)
        try:
            path_nodes = nx.shortest_path(undirected, source, target)
        except nx.NetworkXNoPath:
            return []
        except nx.NodeNotFound:
            return []

        result: list[EntityConnection] = []
        for a, b in zip(path_nodes, path_nodes[1:]):
            result.append(self._edge_between(a, b))
        return result

    def get_node_name(self, entity_type: str, entity_id: int) -> Optional[str]:
        """Display name stored for an entity, or None if it is not in the graph."""
        key = (entity_type, entity_id)
        if key not in self.graph:
            return None
        return self.graph.nodes[key].get("name", "")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _incident_edges(self, node: NodeKey) -> list[tuple[NodeKey, NodeKey, dict]]:
        """Outgoing and incoming edges of *node*, self-loops once, by insertion order."""
        edges: dict[int, tuple[NodeKey, NodeKey, dict]] = {}
        for u, v, data in self.graph.out_edges(node, data=True):
            edges[data["seq"]] = (u, v, data)
        for u, v, data in self.graph.in_edges(node, data=True):
            edges[data["seq"]] = (u, v, data)
        return [edges[seq] for seq in sorted(edges)]

    def _edge_between(self, a: NodeKey, b: NodeKey) -> EntityConnection:
        """The earliest connection joining *a* and *b*, in either direction."""
        candidates = []
        for u, v in ((a, b), (b, a)):
            if self.graph.has_edge(u, v):
                for data in self.graph.get_edge_data(u, v).values():
                    candidates.append((data["seq"], u, v, data))
        if not candidates:
            raise InkEngineError(f"No connection between {a} and {b}")
        _, u, v, data = min(candidates, key=lambda c: c[0])
        return self._to_connection(u, v, data)

    def _to_connection(self, u: NodeKey, v: NodeKey, data: dict) -> EntityConnection:
        """The stored connection, with display names filled from the nodes."""
        connection: EntityConnection = data["connection"]
        update = {}
        source_name = self.graph.nodes[u].get("name")
        target_name = self.graph.nodes[v].get("name")
        if source_name and not connection.source_name:
            update["source_name"] = source_name
        if target_name and not connection.target_name:
            update["target_name"] = target_name
        return connection.model_copy(update=update) if update else connection
