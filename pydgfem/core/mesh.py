import logging
import numpy as np
from typing import Tuple, List, Dict, Optional, Callable

from pydgfem.core.topology import Face, Node, Element

logger = logging.getLogger(__name__)


class Mesh:
    """
    Straight-sided line (1D) or quadrilateral (2D) mesh for DG assembly.

    Builds the unique faces from the corner connectivity, assigns the canonical
    "left" element (first element touching the face) and the "right" neighbour,
    and stores the outward unit normal of the left element on every face.
    Boundary faces carry an integer boundary id used by the physics models to
    reconstruct the exterior state.
    """
    # Local-corner indices that form each face, CCW for quads.
    _FACE_TABLE = {
        'line': ((0,), (1,)),
        'quad': ((0, 1), (1, 2), (2, 3), (3, 0)),
    }
    _DIM = {'line': 1, 'quad': 2}

    def __init__(self,
                 nodes: List['Node'],
                 elements_corner_nodes: np.ndarray,
                 *,
                 element_type: str = 'quad',
                 default_boundary_id: int = 0):
        if element_type not in self._FACE_TABLE:
            raise KeyError(element_type)
        self.element_type = element_type
        self.spatial_dim = self._DIM[element_type]
        self.nodes_list: List['Node'] = nodes
        self.nodes_x_y_pos = np.array([[n.x, n.y] for n in self.nodes_list], dtype=float)[:, :self.spatial_dim]
        self.corner_connectivity = np.asarray(elements_corner_nodes, dtype=int)
        n_corners = 2 if element_type == 'line' else 4
        if self.corner_connectivity.ndim != 2 or self.corner_connectivity.shape[1] != n_corners:
            raise ValueError(f"A '{element_type}' mesh needs {n_corners} corners per element, "
                             f"got connectivity of shape {self.corner_connectivity.shape}.")
        self.elements_list: List['Element'] = []
        self.faces_list: List['Face'] = []
        self._face_dict: Dict[Tuple[int, ...], 'Face'] = {}
        self._build_topology(default_boundary_id)
        self.n_elements = len(self.elements_list)
        logger.debug("Mesh(%s): %d elements, %d faces (%d on the boundary)",
                     element_type, self.n_elements, len(self.faces_list),
                     sum(f.is_boundary for f in self.faces_list))

    def _build_topology(self, default_boundary_id):
        face_defs = self._FACE_TABLE[self.element_type]

        # Step 1: Create Element objects with centroid and measure
        for eid, corners in enumerate(self.corner_connectivity):
            xy = self.nodes_x_y_pos[corners]
            measure = self._element_measure(xy)
            if measure <= 0.0:
                raise ValueError(f"Element {eid} has non-positive measure {measure:.3e}; "
                                 "corners must be ordered left-to-right (line) or CCW (quad).")
            self.elements_list.append(Element(
                id=eid,
                corner_nodes=tuple(int(c) for c in corners),
                element_type=self.element_type,
                centroid=xy.mean(axis=0),
                measure=measure,
            ))

        # Step 2: Build map from each face to the (element, local face) pairs sharing it
        face_incidences: Dict[Tuple[int, ...], List[Tuple[int, int]]] = {}
        for eid, corners in enumerate(self.corner_connectivity):
            for lid, local in enumerate(face_defs):
                key = tuple(sorted(int(corners[c]) for c in local))
                face_incidences.setdefault(key, []).append((eid, lid))

        # Step 3: Create unique Face objects
        for face_gid, (key, shared) in enumerate(face_incidences.items()):
            if len(shared) > 2:
                raise ValueError(f"Face {key} is shared by more than two elements: {shared}")
            left_eid, lid_left = shared[0]
            right_eid, lid_right = shared[1] if len(shared) > 1 else (None, None)
            left_corners = self.corner_connectivity[left_eid]
            directed = tuple(int(left_corners[c]) for c in face_defs[lid_left])
            face_obj = Face(gid=face_gid, nodes=directed, left=left_eid, right=right_eid,
                            normal=self._compute_normal(left_eid, lid_left, directed),
                            lid_left=lid_left, lid_right=lid_right,
                            measure=self._face_measure(directed),
                            boundary_id=default_boundary_id if right_eid is None else None)
            self.faces_list.append(face_obj)
            self._face_dict[key] = face_obj

        # Step 4: Populate each Element's face list and neighbours
        for elem in self.elements_list:
            elem.faces = tuple(
                self._face_dict[tuple(sorted(elem.corner_nodes[c] for c in local))].gid
                for local in face_defs
            )
            for lid, fgid in enumerate(elem.faces):
                face = self.faces_list[fgid]
                elem.neighbors[lid] = face.right if face.left == elem.id else face.left

    def _element_measure(self, xy: np.ndarray) -> float:
        if self.element_type == 'line':
            return float(xy[1, 0] - xy[0, 0])
        x, y = xy[:, 0], xy[:, 1]
        return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))

    def _face_measure(self, directed: Tuple[int, ...]) -> float:
        if self.element_type == 'line':
            return 1.0
        v = self.nodes_x_y_pos[directed[1]] - self.nodes_x_y_pos[directed[0]]
        return float(np.linalg.norm(v))

    def _compute_normal(self, eid: int, lid: int, directed: Tuple[int, ...]) -> np.ndarray:
        """Computes the outward-pointing unit normal of element ``eid`` on local face ``lid``."""
        if self.element_type == 'line':
            return np.array([-1.0]) if lid == 0 else np.array([1.0])
        v_start, v_end = self.nodes_x_y_pos[directed[0]], self.nodes_x_y_pos[directed[1]]
        directed_vec = v_end - v_start
        raw_normal = np.array([directed_vec[1], -directed_vec[0]], dtype=float)
        length = np.linalg.norm(raw_normal)
        if length <= 1e-14:
            raise ValueError(f"Degenerate face {directed} on element {eid}.")
        return raw_normal / length

    # --- Access ---

    def face(self, face_id: int) -> 'Face':
        return self.faces_list[face_id]

    def element(self, elem_id: int) -> 'Element':
        return self.elements_list[elem_id]

    def element_corners(self, elem_id: int) -> np.ndarray:
        """Corner coordinates ``(n_corners, dim)`` of an element."""
        return self.nodes_x_y_pos[self.corner_connectivity[elem_id]]

    def face_midpoint(self, face_id: int) -> np.ndarray:
        return self.nodes_x_y_pos[list(self.faces_list[face_id].nodes)].mean(axis=0)

    def boundary_faces(self) -> List['Face']:
        return [f for f in self.faces_list if f.right is None]

    def interior_faces(self) -> List['Face']:
        return [f for f in self.faces_list if f.right is not None]

    def element_char_length(self, elem_id: int, face_id: int = None) -> float:
        """Characteristic size ``|K| / |F|`` (the element length for line meshes)."""
        elem = self.elements_list[elem_id]
        if self.element_type == 'line':
            return elem.measure
        if face_id is None:
            return float(np.sqrt(elem.measure))
        return elem.measure / self.faces_list[face_id].measure

    def areas(self) -> np.ndarray:
        return np.array([e.measure for e in self.elements_list])

    # --- Boundary colouring ---

    def tag_boundary_faces(self, tag_functions: Dict[int, Callable[..., bool]]):
        """Applies integer boundary ids to boundary faces based on their midpoint location.

        ``tag_functions`` maps a boundary id to a predicate of the midpoint
        coordinates; the first predicate that matches wins.
        """
        for face in self.faces_list:
            if face.right is not None:
                continue
            midpoint = self.face_midpoint(face.gid)
            for bid, func in tag_functions.items():
                if func(*midpoint):
                    face.boundary_id = int(bid)
                    break

    def boundary_ids(self) -> List[int]:
        return sorted({f.boundary_id for f in self.faces_list if f.right is None})

    def __repr__(self):
        return (f"<Mesh {self.element_type}: {self.n_elements} elements, "
                f"{len(self.faces_list)} faces>")
