# dofhandler.py
import logging
import numpy as np
from typing import Callable, List

from pydgfem.core.mesh import Mesh
from pydgfem.fem import transform
from pydgfem.fem.reference import get_reference

logger = logging.getLogger(__name__)


class DofHandler:
    """Element-local (discontinuous) DOF numbering for an ``nstate`` system.

    Local DOFs are component-major: ``local = istate * n_shape + ishape``.
    Global DOFs of element ``e`` are the contiguous block
    ``e * n_dofs_per_cell + local``.
    """

    def __init__(self, mesh: Mesh, poly_order: int, nstate: int = 1, *,
                 node_family: str = "equispaced"):
        if nstate < 1:
            raise ValueError(f"nstate must be positive, got {nstate}")
        self.mesh = mesh
        self.poly_order = int(poly_order)
        self.nstate = int(nstate)
        self.node_family = node_family
        self.ref = get_reference(mesh.element_type, self.poly_order, node_family)
        self.n_shape = self.ref.n_shape
        self.n_dofs_per_cell = self.nstate * self.n_shape
        self.n_dofs = self.n_dofs_per_cell * mesh.n_elements
        self._component = np.repeat(np.arange(self.nstate), self.n_shape)
        logger.debug("DofHandler: degree %d, %d states, %d dofs/cell, %d dofs total",
                     self.poly_order, self.nstate, self.n_dofs_per_cell, self.n_dofs)

    def get_elemental_dofs(self, elem_id: int) -> np.ndarray:
        return np.arange(self.n_dofs_per_cell) + elem_id * self.n_dofs_per_cell

    def component(self, local_dof: int) -> int:
        """State component tag of a local DOF."""
        return int(self._component[local_dof])

    @property
    def components(self) -> np.ndarray:
        return self._component

    def local_index(self, istate: int, ishape: int) -> int:
        return istate * self.n_shape + ishape

    def support_points(self, elem_id: int) -> np.ndarray:
        """Physical coordinates ``(n_shape, dim)`` of the element's Lagrange nodes."""
        corners = self.mesh.element_corners(elem_id)
        return np.array([transform.x_mapping(corners, p) for p in self.ref.nodes])

    def interpolate(self, func: Callable[[np.ndarray], np.ndarray]) -> np.ndarray:
        """Nodal interpolant of ``func(x) -> State`` as a global coefficient vector."""
        U = np.zeros(self.n_dofs)
        for elem in self.mesh.elements_list:
            dofs = self.get_elemental_dofs(elem.id)
            for ishape, x in enumerate(self.support_points(elem.id)):
                state = np.atleast_1d(np.asarray(func(x), dtype=float))
                if state.shape[0] != self.nstate:
                    raise ValueError(f"Interpolated function returned {state.shape[0]} "
                                     f"states, expected {self.nstate}.")
                U[dofs[ishape + self.n_shape * np.arange(self.nstate)]] = state
        return U

    def cell_dofs_list(self) -> List[np.ndarray]:
        return [self.get_elemental_dofs(e.id) for e in self.mesh.elements_list]

    def __repr__(self):
        return (f"<DofHandler degree={self.poly_order} nstate={self.nstate} "
                f"n_dofs={self.n_dofs}>")
