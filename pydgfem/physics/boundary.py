from enum import IntEnum


class BoundaryType(IntEnum):
    """Boundary ids understood by ``PhysicsModel.boundary_face_values``."""
    MANUFACTURED_SOLUTION = 1000
    WALL = 1001
    OUTFLOW = 1002
    INFLOW = 1003
    FARFIELD = 1004
    EXTRAPOLATION = 1005


def as_boundary_type(boundary_id) -> BoundaryType:
    try:
        return BoundaryType(int(boundary_id))
    except ValueError:
        raise ValueError(f"Unknown boundary id {boundary_id}; "
                         f"expected one of {[int(b) for b in BoundaryType]}") from None
