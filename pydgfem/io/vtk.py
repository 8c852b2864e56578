import logging
import numpy as np
import meshio
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

_REF_CORNERS = {
    'line': np.array([[-1.0], [1.0]]),
    'quad': np.array([[-1.0, -1.0], [1.0, -1.0], [1.0, 1.0], [-1.0, 1.0]]),
}


def state_names(physics) -> list:
    """Default field names: conservative variables for Euler, ``u0, u1, ...`` otherwise."""
    if type(physics).__name__ == "Euler":
        return ["density"] + [f"momentum_{c}" for c in "xy"[:physics.dim]] + ["energy"]
    return [f"u{s}" for s in range(physics.nstate)]


def export_vtk(filename: str, system, solution: Optional[np.ndarray] = None,
               names: Optional[Sequence[str]] = None):
    """
    Exports a DG solution to a VTK (.vtu) file.

    Every cell gets its own copy of its corner points so the jumps between
    cells survive; the per-state point data is the cell polynomial evaluated
    at those corners.

    Args:
        filename: The path to the output file (e.g., 'results/solution_001.vtu').
        system: The DGSystem holding mesh, dof handler and physics.
        solution: Global coefficient vector; defaults to ``system.solution``.
        names: One field name per state.
    """
    mesh, dh = system.mesh, system.dof_handler
    U = system.solution if solution is None else np.asarray(solution, dtype=float)
    if U.shape != (dh.n_dofs,):
        raise ValueError(f"Solution has shape {U.shape}, expected ({dh.n_dofs},).")
    names = list(state_names(system.physics) if names is None else names)
    if len(names) != dh.nstate:
        raise ValueError(f"Got {len(names)} field names for {dh.nstate} states.")

    # 1. Discontinuous geometry: corners duplicated per cell
    n_corners = mesh.corner_connectivity.shape[1]
    points = np.zeros((mesh.n_elements * n_corners, 3))
    for elem in mesh.elements_list:
        points[elem.id * n_corners:(elem.id + 1) * n_corners, :mesh.spatial_dim] = \
            mesh.element_corners(elem.id)
    connectivity = np.arange(mesh.n_elements * n_corners).reshape(mesh.n_elements, n_corners)
    cells = [meshio.CellBlock(mesh.element_type, connectivity)]

    # 2. Point data: each state evaluated at the reference corners
    vals, _ = dh.ref.tabulate(_REF_CORNERS[mesh.element_type])
    point_data = {name: np.zeros(points.shape[0]) for name in names}
    for elem in mesh.elements_list:
        coeffs = U[dh.get_elemental_dofs(elem.id)]
        rows = slice(elem.id * n_corners, (elem.id + 1) * n_corners)
        for s, name in enumerate(names):
            point_data[name][rows] = vals @ coeffs[s * dh.n_shape:(s + 1) * dh.n_shape]

    cell_data = {"cell_id": [np.arange(mesh.n_elements)]}

    # 3. write
    meshio.Mesh(points, cells, point_data=point_data, cell_data=cell_data).write(filename)
    logger.info("Solution exported to %s", filename)
    return filename
