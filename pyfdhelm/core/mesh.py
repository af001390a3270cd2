import logging
from typing import Tuple, List, Dict, Callable, Iterable

import numpy as np

from pyfdhelm.core.topology import Edge, Node, Element
from pyfdhelm.fem.reference import face_local_nodes

logger = logging.getLogger(__name__)

# local corner pairs of each face, walked counter-clockwise
FACE_CORNERS = {
    'quad': ((0, 1), (1, 2), (2, 3), (3, 0)),
    'tri':  ((0, 1), (1, 2), (2, 0)),
}


def _chord_normal(xa: np.ndarray, xb: np.ndarray) -> np.ndarray:
    """Unit normal to the right of the chord xa -> xb (outward for a CCW owner)."""
    t = xb - xa
    length = np.hypot(t[0], t[1])
    if length <= 1e-14:
        return np.zeros(2)
    return np.array([t[1], -t[0]]) / length


class Mesh:
    """
    Meridional (r, z) mesh with face connectivity.

    Every face is stored once as an :class:`Edge`. Its ``left`` element is the
    first element (by id) that owns it and ``nodes`` are the two corners in that
    element's counter-clockwise order, so ``normal`` points out of ``left``.
    Boundary faces have ``right is None``. ``lid`` is the local face index in the
    left element and ``all_nodes`` lists every lattice node on the face in the
    same direction.
    """

    def __init__(self,
                 nodes: Iterable[Node],
                 element_connectivity: np.ndarray,
                 elements_corner_nodes: np.ndarray = None,
                 *,
                 element_type: str = 'quad',
                 poly_order: int = 1):
        if element_type not in FACE_CORNERS:
            raise KeyError(element_type)
        self.element_type = element_type
        self.poly_order = int(poly_order)
        self.spatial_dim = 2

        self.nodes_list: List[Node] = list(nodes)
        self.nodes = np.array([n.id for n in self.nodes_list])
        self.nodes_x_y_pos = np.array([(n.x, n.y) for n in self.nodes_list], dtype=float).reshape(-1, 2)

        self.elements_connectivity = np.asarray(element_connectivity, dtype=int)
        # first-order meshes may omit the corner table
        corners = self.elements_connectivity if elements_corner_nodes is None else elements_corner_nodes
        self.corner_connectivity = np.asarray(corners, dtype=int)
        self.n_elements = self.elements_connectivity.shape[0]

        self.elements_list: List[Element] = [
            Element(id=eid,
                    nodes=tuple(int(n) for n in self.elements_connectivity[eid]),
                    corner_nodes=tuple(int(n) for n in self.corner_connectivity[eid]),
                    element_type=element_type,
                    poly_order=self.poly_order,
                    corner_mean=self.nodes_x_y_pos[self.corner_connectivity[eid]].mean(axis=0))
            for eid in range(self.n_elements)
        ]
        self.edges_list: List[Edge] = []
        self._connect_faces()
        logger.debug(f"Built {self!r}")

    def _connect_faces(self) -> None:
        pairs = FACE_CORNERS[self.element_type]
        by_key: Dict[Tuple[int, int], Edge] = {}
        face_gids = np.empty((self.n_elements, len(pairs)), dtype=int)

        for elem in self.elements_list:
            for lid, (a, b) in enumerate(pairs):
                va, vb = elem.corner_nodes[a], elem.corner_nodes[b]
                key = (min(va, vb), max(va, vb))
                edge = by_key.get(key)
                if edge is None:
                    lattice = face_local_nodes(self.element_type, self.poly_order, lid)
                    edge = Edge(gid=len(self.edges_list), nodes=(va, vb), left=elem.id, right=None,
                                normal=_chord_normal(self.nodes_x_y_pos[va], self.nodes_x_y_pos[vb]),
                                lid=lid, all_nodes=tuple(elem.nodes[k] for k in lattice))
                    by_key[key] = edge
                    self.edges_list.append(edge)
                elif edge.right is None:
                    edge.right = elem.id
                else:
                    raise ValueError(f"Edge {key} is shared by more than two elements: "
                                     f"{[edge.left, edge.right, elem.id]}")
                face_gids[elem.id, lid] = edge.gid

        for elem in self.elements_list:
            elem.edges = tuple(int(g) for g in face_gids[elem.id])
            for lid, gid in enumerate(elem.edges):
                edge = self.edges_list[gid]
                elem.neighbors[lid] = edge.left if edge.right == elem.id else edge.right

    # --- Public API ---
    def neighbors(self) -> List[List[int]]:
        """Elements sharing a face with each element, in face order."""
        return [[n for n in elem.neighbors.values() if n is not None] for elem in self.elements_list]

    def edge(self, edge_id: int) -> Edge:
        if edge_id < 0 or edge_id >= len(self.edges_list):
            raise IndexError(f"Edge ID {edge_id} out of range.")
        return self.edges_list[edge_id]

    def boundary_edges(self, tag: str | None = None) -> List[Edge]:
        """Boundary edges, optionally restricted to those carrying `tag`."""
        return [e for e in self.edges_list
                if e.is_boundary and (tag is None or e.tag == tag)]

    def tag_boundary_edges(self, tag_functions: Dict[str, Callable[[float, float], bool]]):
        """Tag each boundary edge with the first predicate that accepts its chord midpoint."""
        for edge in self.boundary_edges():
            r, z = 0.5 * (self.nodes_x_y_pos[edge.nodes[0]] + self.nodes_x_y_pos[edge.nodes[1]])
            edge.tag = next((name for name, pred in tag_functions.items() if pred(r, z)), edge.tag)

    def get_nodes_from_tags(self, tags) -> List[int]:
        """Sorted unique node ids (high-order nodes included) on edges carrying any of `tags`."""
        wanted = {tags} if isinstance(tags, str) else set(tags)
        return sorted({n for e in self.edges_list if e.tag in wanted for n in e.all_nodes})

    def areas(self) -> np.ndarray:
        """Shoelace area of each element's corner polygon."""
        xy = self.nodes_x_y_pos[self.corner_connectivity]
        x, y = xy[..., 0], xy[..., 1]
        return 0.5 * np.abs(np.sum(x * np.roll(y, -1, axis=1) - y * np.roll(x, -1, axis=1), axis=1))

    def __repr__(self):
        return (f"<Mesh {self.element_type}/P{self.poly_order}: {len(self.nodes_list)} nodes, "
                f"{self.n_elements} elements, {len(self.edges_list)} edges>")
