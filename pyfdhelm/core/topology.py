import numpy as np
from dataclasses import dataclass, field
from typing import Tuple, Dict, Optional


@dataclass(slots=True, eq=False)
class Node:
    """A mesh node in the meridional half plane.

    ``x`` is the radial coordinate r (>= 0 in a valid mesh), ``y`` the axial
    coordinate z.
    """
    id: int
    x: float
    y: float
    tag: Optional[str] = None

    @property
    def r(self) -> float:
        return self.x

    @property
    def z(self) -> float:
        return self.y

    def __repr__(self):
        return f"Node(id={self.id}, r={self.x:g}, z={self.y:g}, tag={self.tag!r})"


@dataclass(slots=True)
class Edge:
    gid: int
    nodes: Tuple[int, int]      # Global node indices of the edge's endpoints
    left: Optional[int]         # Element ID on the left side of the edge
    right: Optional[int]        # Element ID on the right side of the edge (None on the boundary)
    normal: np.ndarray          # Chord normal, pointing outward from the left element
    tag: str = ""
    lid: Optional[int] = None      # Local face index within the left element
    all_nodes: Tuple[int, ...] = ()  # Every node on the edge, ordered along the left element's CCW traversal

    @property
    def is_boundary(self) -> bool:
        return self.right is None


@dataclass(slots=True)
class Element:
    """One cell of the meridional mesh; faces are numbered by ``edges`` order."""
    id: int
    nodes: Tuple[int, ...]                 # all element nodes, reference lattice order
    corner_nodes: Tuple[int, ...] = ()     # CCW
    edges: Tuple[int, ...] = ()            # global edge id of local face 0, 1, ...
    neighbors: Dict[int, Optional[int]] = field(default_factory=dict)  # local face -> element across it
    element_type: str = "quad"
    poly_order: int = 1
    tag: str = ""
    corner_mean: Optional[np.ndarray] = None

    def centroid(self) -> Tuple[float, float]:
        if self.corner_mean is None:
            raise ValueError(f"Element {self.id} has no corner coordinates attached")
        return float(self.corner_mean[0]), float(self.corner_mean[1])
