import logging

from pydgfem.physics.base import PhysicsModel
from pydgfem.physics.convection_diffusion import ConvectionDiffusion
from pydgfem.physics.burgers import InviscidBurgers
from pydgfem.physics.euler import Euler
from pydgfem.physics.manufactured import ManufacturedSolution

logger = logging.getLogger(__name__)

PDE_TYPES = ("advection", "advection_vector", "diffusion", "convection_diffusion",
             "burgers_inviscid", "euler")


def create_physics(parameters) -> PhysicsModel:
    """Build the physics model named by ``parameters.pde_type``.

    Every model carries a manufactured solution so that manufactured boundary
    conditions and source terms are available; a user-supplied
    ``parameters.manufactured_solution`` overrides the default one.
    """
    pde = parameters.pde_type
    dim = parameters.dimension
    manufactured = getattr(parameters, "manufactured_solution", None)
    if pde in ("advection", "advection_vector", "diffusion", "convection_diffusion"):
        nstate = 2 if pde == "advection_vector" else 1
        physics = ConvectionDiffusion(
            dim, nstate,
            convection=pde != "diffusion",
            diffusion=pde in ("diffusion", "convection_diffusion"),
            advection_speed=parameters.advection_speed,
            diffusion_coefficient=parameters.diffusion_coefficient,
            diffusion_tensor=parameters.diffusion_tensor,
            manufactured=manufactured or ManufacturedSolution.sine_product(dim, nstate),
        )
    elif pde == "burgers_inviscid":
        physics = InviscidBurgers(dim, manufactured=manufactured or ManufacturedSolution.sine_product(dim, 1))
    elif pde == "euler":
        physics = Euler(dim, gamma=parameters.gamma, mach_inf=parameters.mach_inf,
                        angle_of_attack=parameters.angle_of_attack,
                        manufactured=manufactured or Euler.default_manufactured_solution(
                            dim, gamma=parameters.gamma, mach_inf=parameters.mach_inf))
    else:
        raise KeyError(pde)
    logger.info("Created physics %r for pde_type '%s'", physics, pde)
    return physics
