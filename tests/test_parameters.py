import pytest

from pydgfem import DGParameters


def test_defaults_and_state_count():
    p = DGParameters()
    assert p.pde_type == "advection" and p.dimension == 2 and p.nstate == 1
    assert DGParameters(pde_type="euler", dimension=1).nstate == 3
    assert DGParameters(pde_type="euler", dimension=2).nstate == 4
    assert DGParameters(pde_type="advection_vector").nstate == 2


def test_collocation_switches_node_family():
    p = DGParameters(use_collocated_nodes=True, quadrature_family="gauss_lobatto")
    assert p.node_family == "gauss_lobatto"


@pytest.mark.parametrize("kwargs", [
    dict(pde_type="navier_stokes"),
    dict(dimension=3),
    dict(conv_num_flux="hllc"),
    dict(conv_num_flux="roe", pde_type="advection"),
    dict(diss_num_flux="bassi_rebay"),
    dict(poly_degree=-1),
    dict(overintegration=-1),
    dict(penalty_factor=0.0),
    dict(node_family="chebyshev"),
    dict(quadrature_family="newton_cotes"),
    dict(quadrature_family="gauss_lobatto", poly_degree=0),
    dict(use_collocated_nodes=True, overintegration=1),
    dict(use_split_form=True, use_collocated_nodes=True, pde_type="euler"),
    dict(use_split_form=True, pde_type="advection"),
    dict(advection_speed=(1.0,)),
])
def test_invalid_parameters_raise(kwargs):
    with pytest.raises(ValueError):
        DGParameters(**kwargs)


def test_from_dict():
    p = DGParameters.from_dict({"pde_type": "burgers_inviscid", "dimension": 1, "poly_degree": 3})
    assert p.pde_type == "burgers_inviscid" and p.poly_degree == 3
    with pytest.raises(ValueError):
        DGParameters.from_dict({"polynomial_degree": 3})


def test_split_form_accepts_matching_node_and_quadrature_families():
    p = DGParameters(use_split_form=True, node_family="gauss", quadrature_family="gauss", poly_degree=2)
    assert p.is_collocated and not p.use_collocated_nodes
    with pytest.raises(ValueError):
        DGParameters(use_split_form=True, node_family="gauss", quadrature_family="gauss",
                     overintegration=1)
    with pytest.raises(ValueError):
        DGParameters(use_split_form=True, node_family="gauss_lobatto", quadrature_family="gauss")
