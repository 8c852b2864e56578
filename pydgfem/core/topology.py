import numpy as np
from dataclasses import dataclass, field
from typing import Tuple, Dict, Optional


class Node:
    def __init__(self, id, x, y=0.0, tag=None):
        self.x = x
        self.y = y
        self.id = id
        self.tag = tag

    def __repr__(self):
        return f"Node {self.id}({self.x:.3f}, {self.y:.3f}, tag='{self.tag}')"

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return np.isclose(self.x, other.x) and np.isclose(self.y, other.y)

    def __hash__(self):
        return hash((self.x, self.y))

    def __getitem__(self, idx):
        if   idx == 0: return self.x
        elif idx == 1: return self.y
        raise IndexError("Node supports indices 0 (x) and 1 (y)")

    def __iter__(self):
        yield self.x
        yield self.y


@dataclass(slots=True)
class Face:
    gid: int
    nodes: Tuple[int, ...]      # Global corner ids, directed CCW w.r.t. the left element
    left: int                   # Element on the canonical side; owns the normal
    right: Optional[int]        # Neighbour element, None on the boundary
    normal: np.ndarray          # Unit normal, pointing outward from the left element
    lid_left: int               # Local face index within the left element
    lid_right: Optional[int] = None
    measure: float = 1.0        # Face length (1 for the point faces of a line mesh)
    boundary_id: Optional[int] = None

    @property
    def is_boundary(self) -> bool:
        return self.right is None


@dataclass(slots=True)
class Element:
    id: int                     # Element ID
    corner_nodes: Tuple[int, ...]   # Global corner ids, CCW for quads, left-to-right for lines
    element_type: str = "quad"
    faces: Tuple[int, ...] = field(default_factory=tuple)
    neighbors: Dict[int, Optional[int]] = field(default_factory=dict)
    centroid: np.ndarray = None
    measure: float = 0.0

    def contains_face(self, face_id: int) -> bool:
        """Check if the element contains a specific face."""
        return face_id in self.faces
