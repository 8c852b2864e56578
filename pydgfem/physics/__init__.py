from .base import PhysicsModel
from .boundary import BoundaryType
from .convection_diffusion import ConvectionDiffusion
from .burgers import InviscidBurgers
from .euler import Euler
from .manufactured import ManufacturedSolution
from .factory import create_physics, PDE_TYPES

__all__ = ["PhysicsModel", "BoundaryType", "ConvectionDiffusion", "InviscidBurgers",
           "Euler", "ManufacturedSolution", "create_physics", "PDE_TYPES"]
