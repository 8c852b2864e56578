"""pydgfem.fem.values
Per-entity basis tables (values, physical gradients, JxW, points, normals)
consumed by the DG assemblers.
"""
import logging
import numpy as np
from typing import Optional, Tuple

from pydgfem.fem import transform
from pydgfem.fem.reference import Ref, get_reference, get_reference_on_nodes
from pydgfem.integration.quadrature import volume, face, line_rule

logger = logging.getLogger(__name__)


class _BasisTable:
    """Shared component-major bookkeeping for cell and face tables."""

    def __init__(self, ref: Ref, nstate: int):
        self.ref = ref
        self.nstate = int(nstate)
        self.n_shape = ref.n_shape
        self.n_dofs = self.nstate * self.n_shape
        self.dim = ref.dim

    def split_dof(self, idof: int) -> Tuple[int, int]:
        """``(istate, ishape)`` of local DOF ``idof``."""
        return divmod(int(idof), self.n_shape)

    @property
    def n_q(self) -> int:
        return self.JxW.shape[0]


class CellValues(_BasisTable):
    """Basis values and physical gradients at the volume quadrature points of one cell.

    Attributes
    ----------
    shape_values : (n_q, n_shape)
    shape_grads : (n_q, n_shape, dim)
    JxW : (n_q,)
    quadrature_points : (n_q, dim) physical coordinates
    """

    def __init__(self, corners: np.ndarray, ref: Ref, points: np.ndarray,
                 weights: np.ndarray, nstate: int = 1):
        super().__init__(ref, nstate)
        corners = np.asarray(corners, dtype=float)
        vals, ref_grads = ref.tabulate(points)
        n_q = points.shape[0]
        self.shape_values = vals
        self.shape_grads = np.empty_like(ref_grads)
        self.JxW = np.empty(n_q)
        self.quadrature_points = np.empty((n_q, self.dim))
        for q, p in enumerate(points):
            J = transform.jacobian(corners, p)
            detJ = np.linalg.det(J)
            if detJ <= 0.0:
                raise ValueError(f"Non-positive Jacobian determinant {detJ:.3e} at {p}.")
            self.shape_grads[q] = ref_grads[q] @ np.linalg.inv(J)
            self.JxW[q] = weights[q] * detJ
            self.quadrature_points[q] = transform.x_mapping(corners, p)
        self.reference_points = np.asarray(points, dtype=float)

    @property
    def measure(self) -> float:
        return float(self.JxW.sum())


class FaceValues(_BasisTable):
    """Basis traces of one cell at face quadrature points.

    ``normals`` are the outward unit normals of *this* cell; for the exterior
    side of an interior face they are the negated canonical normal.
    """

    def __init__(self, corners: np.ndarray, ref: Ref, ref_points: np.ndarray,
                 JxW: np.ndarray, normals: np.ndarray, nstate: int = 1):
        super().__init__(ref, nstate)
        corners = np.asarray(corners, dtype=float)
        vals, ref_grads = ref.tabulate(ref_points)
        n_q = ref_points.shape[0]
        self.shape_values = vals
        self.shape_grads = np.empty_like(ref_grads)
        self.quadrature_points = np.empty((n_q, self.dim))
        for q, p in enumerate(ref_points):
            self.shape_grads[q] = ref_grads[q] @ np.linalg.inv(transform.jacobian(corners, p))
            self.quadrature_points[q] = transform.x_mapping(corners, p)
        self.JxW = np.asarray(JxW, dtype=float)
        self.normals = np.asarray(normals, dtype=float)
        self.reference_points = np.asarray(ref_points, dtype=float)


def _face_jacobian(corners: np.ndarray, element_type: str, lid: int, p: np.ndarray) -> float:
    """Length ratio physical/reference of local face ``lid`` at reference point ``p``."""
    if element_type == "line":
        return 1.0
    t_ref = np.array([[1, 0], [0, 1], [1, 0], [0, 1]], dtype=float)[lid]
    return float(np.linalg.norm(transform.jacobian(corners, p) @ t_ref))


class Discretization:
    """Builds and caches the basis tables of every cell and face of a mesh.

    The flux basis is the Lagrange basis interpolating at the 1-D volume
    quadrature nodes; its values at the quadrature points are the identity
    and its gradients are the differentiation matrices of the strong form.
    """

    def __init__(self, mesh, poly_order: int, nstate: int, *,
                 overintegration: int = 0,
                 node_family: str = "equispaced",
                 quadrature_family: str = "gauss"):
        self.mesh = mesh
        self.poly_order = int(poly_order)
        self.nstate = int(nstate)
        self.element_type = mesh.element_type
        self.n_q_1d = self.poly_order + 1 + int(overintegration)
        self.quadrature_family = quadrature_family
        self.ref = get_reference(self.element_type, self.poly_order, node_family)
        q1d, _ = line_rule(self.n_q_1d, quadrature_family)
        self.flux_ref = get_reference_on_nodes(self.element_type, tuple(q1d))
        self.volume_points, self.volume_weights = volume(self.element_type, self.n_q_1d, quadrature_family)
        self._cells = {}
        self._flux = {}
        self._faces = {}
        logger.debug("Discretization: degree %d, %d quad points per direction (%s)",
                     self.poly_order, self.n_q_1d, quadrature_family)

    @property
    def is_collocated(self) -> bool:
        """True when every solution node is a volume quadrature point with matching index."""
        vals, _ = self.ref.tabulate(self.volume_points)
        return vals.shape[0] == vals.shape[1] and np.allclose(vals, np.eye(vals.shape[0]), atol=1e-12)

    def cell_values(self, elem_id: int) -> CellValues:
        if elem_id not in self._cells:
            self._cells[elem_id] = CellValues(self.mesh.element_corners(elem_id), self.ref,
                                              self.volume_points, self.volume_weights, self.nstate)
        return self._cells[elem_id]

    def flux_values(self, elem_id: int) -> CellValues:
        if elem_id not in self._flux:
            self._flux[elem_id] = CellValues(self.mesh.element_corners(elem_id), self.flux_ref,
                                             self.volume_points, self.volume_weights, self.nstate)
        return self._flux[elem_id]

    def cell_face_values(self, elem_id: int, lid: int, ref: Optional[Ref] = None) -> FaceValues:
        """Trace of ``ref`` (solution basis by default) on local face ``lid`` of a cell."""
        ref = self.ref if ref is None else ref
        corners = self.mesh.element_corners(elem_id)
        pts, w = face(self.element_type, lid, self.n_q_1d, self.quadrature_family)
        JxW = np.array([w[q] * _face_jacobian(corners, self.element_type, lid, p)
                        for q, p in enumerate(pts)])
        fgid = self.mesh.element(elem_id).faces[lid]
        f = self.mesh.face(fgid)
        n = f.normal if f.left == elem_id else -f.normal
        return FaceValues(corners, ref, pts, JxW, np.tile(n, (pts.shape[0], 1)), self.nstate)

    def face_values(self, face_id: int) -> Tuple[FaceValues, Optional[FaceValues]]:
        """``(interior, exterior)`` tables of a face; exterior is None on the boundary.

        Both sides share the canonical physical points, weights and normal of
        the left element; the right element's reference points are recovered
        by inverse mapping.
        """
        if face_id in self._faces:
            return self._faces[face_id]
        f = self.mesh.face(face_id)
        fv_int = self.cell_face_values(f.left, f.lid_left)
        fv_ext = None
        if f.right is not None:
            corners_ext = self.mesh.element_corners(f.right)
            ref_pts_ext = np.array([transform.inverse_mapping(corners_ext, x)
                                    for x in fv_int.quadrature_points])
            fv_ext = FaceValues(corners_ext, self.ref, ref_pts_ext, fv_int.JxW,
                                -fv_int.normals, self.nstate)
            if not np.allclose(fv_ext.quadrature_points, fv_int.quadrature_points, atol=1e-10):
                raise RuntimeError(f"Face {face_id}: neighbour quadrature points do not match.")
        self._faces[face_id] = (fv_int, fv_ext)
        return self._faces[face_id]
