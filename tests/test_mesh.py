# tests/test_mesh.py
"""
MESH ASSEMBLY TESTS
===================

A three-element frame: two collinear members along x, then a member
along z at the far end with one tenth of the modulus.

                    3
                    |   (E/10)
                    |
    0 ------ 1 ---- 2          x →

Checks:
1. The assembled stiffness matches a hand-derived 24×24 matrix
2. K and M are symmetric
3. Boundary conditions decouple their DOFs in M⁻¹ only
4. M⁻¹ inverts M for a single element
"""

import numpy as np
import pytest

from explicit_frame.mesh import Mesh
from explicit_frame.prescribed import BC, BCType
from explicit_frame.v3d.model import BeamProps, Node3D
from explicit_frame.v3d.elements import EulerBernoulliBeam, TimoshenkoBeam


# Global stiffness of make_three_element_frame(), DOF order [ux, uy, uz, rx, ry, rz] per node
EXPECTED_K = np.array([
    [10., 0., 0., 0., 0., 0., -10., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0.],
    [0., 120., 0., 0., 0., 60., 0., -120., 0., 0., 0., 60., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0.],
    [0., 0., 120., 0., -60., 0., 0., 0., -120., 0., -60., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0.],
    [0., 0., 0., 10., 0., 0., 0., 0., 0., -10., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0.],
    [0., 0., -60., 0., 40., 0., 0., 0., 60., 0., 20., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0.],
    [0., 60., 0., 0., 0., 40., 0., -60., 0., 0., 0., 20., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0.],
    [-10., 0., 0., 0., 0., 0., 20., 0., 0., 0., 0., 0., -10., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0.],
    [0., -120., 0., 0., 0., -60., 0., 240., 0., 0., 0., 0., 0., -120., 0., 0., 0., 60., 0., 0., 0., 0., 0., 0.],
    [0., 0., -120., 0., 60., 0., 0., 0., 240., 0., 0., 0., 0., 0., -120., 0., -60., 0., 0., 0., 0., 0., 0., 0.],
    [0., 0., 0., -10., 0., 0., 0., 0., 0., 20., 0., 0., 0., 0., 0., -10., 0., 0., 0., 0., 0., 0., 0., 0.],
    [0., 0., -60., 0., 20., 0., 0., 0., 0., 0., 80., 0., 0., 0., 60., 0., 20., 0., 0., 0., 0., 0., 0., 0.],
    [0., 60., 0., 0., 0., 20., 0., 0., 0., 0., 0., 80., 0., -60., 0., 0., 0., 20., 0., 0., 0., 0., 0., 0.],
    [0., 0., 0., 0., 0., 0., -10., 0., 0., 0., 0., 0., 22., 0., 0., 0., 6., 0., -12., 0., 0., 0., 6., 0.],
    [0., 0., 0., 0., 0., 0., 0., -120., 0., 0., 0., -60., 0., 132., 0., -6., 0., -60., 0., -12., 0., -6., 0., 0.],
    [0., 0., 0., 0., 0., 0., 0., 0., -120., 0., 60., 0., 0., 0., 121., 0., 60., 0., 0., 0., -1., 0., 0., 0.],
    [0., 0., 0., 0., 0., 0., 0., 0., 0., -10., 0., 0., 0., -6., 0., 14., 0., 0., 0., 6., 0., 2., 0., 0.],
    [0., 0., 0., 0., 0., 0., 0., 0., -60., 0., 20., 0., 6., 0., 60., 0., 44., 0., -6., 0., 0., 0., 2., 0.],
    [0., 0., 0., 0., 0., 0., 0., 60., 0., 0., 0., 20., 0., -60., 0., 0., 0., 41., 0., 0., 0., 0., 0., -1.],
    [0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., -12., 0., 0., 0., -6., 0., 12., 0., 0., 0., -6., 0.],
    [0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., -12., 0., 6., 0., 0., 0., 12., 0., 6., 0., 0.],
    [0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., -1., 0., 0., 0., 0., 0., 1., 0., 0., 0.],
    [0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., -6., 0., 2., 0., 0., 0., 6., 0., 4., 0., 0.],
    [0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 6., 0., 0., 0., 2., 0., -6., 0., 0., 0., 4., 0.],
    [0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., 0., -1., 0., 0., 0., 0., 0., 1.],
])


def make_three_element_frame(bcs=()):
    props = BeamProps(E=10.0, G=10.0, A=1.0, Iz=1.0, Iy=1.0, J=1.0, density=1.0, normal=(0.0, 1.0, 0.0))
    soft = BeamProps(E=1.0, G=1.0, A=1.0, Iz=1.0, Iy=1.0, J=1.0, density=1.0, normal=(0.0, 1.0, 0.0))
    nodes = [Node3D(0.0, 0.0, 0.0), Node3D(1.0, 0.0, 0.0), Node3D(2.0, 0.0, 0.0), Node3D(2.0, 0.0, 1.0)]
    elements = [
        EulerBernoulliBeam(0, 1, props),
        EulerBernoulliBeam(1, 2, props),
        EulerBernoulliBeam(2, 3, soft),
    ]
    return Mesh(nodes, elements, list(bcs))


def steel_props(normal=(0.0, 1.0, 0.0)):
    return BeamProps(E=200e9, G=80e9, A=0.0314159265358979, Iz=7.85398e-5, Iy=7.85398e-5,
                     J=1.570796e-4, density=7800.0, normal=normal)


class TestGlobalStiffness:
    """Assembled K against the hand-derived matrix."""

    def test_matches_expected_matrix(self):
        mesh = make_three_element_frame()
        K = mesh.stiffness.toarray()

        assert K.shape == (24, 24)
        np.testing.assert_allclose(K, EXPECTED_K, rtol=1e-12, atol=1e-10)

    def test_vertical_member_rotated_into_global_axes(self):
        """Node 2 sees the soft vertical member: its axial term lands on uz, bending on ux/uy."""
        K = make_three_element_frame().stiffness.toarray()

        assert np.isclose(K[12, 12], 22.0)   # 10 (axial, 1-2) + 12 (bending, 2-3)
        assert np.isclose(K[13, 13], 132.0)  # 120 (bending, 1-2) + 12 (bending, 2-3)
        assert np.isclose(K[14, 14], 121.0)  # 120 (bending, 1-2) + 1 (axial, 2-3)

    def test_dimensions(self):
        mesh = make_three_element_frame()
        assert mesh.n_nodes == 4
        assert mesh.ndof == 24
        for A in (mesh.stiffness, mesh.mass, mesh.inv_mass):
            assert A.shape == (24, 24)


class TestSymmetry:

    def test_stiffness_and_mass_symmetric(self):
        mesh = make_three_element_frame()
        K = mesh.stiffness.toarray()
        M = mesh.mass.toarray()

        np.testing.assert_allclose(K, K.T, atol=1e-12)
        np.testing.assert_allclose(M, M.T, atol=1e-12)

    def test_skewed_element_symmetric(self):
        """Symmetry must survive an arbitrary rotation."""
        nodes = np.array([[0.0, 0.0, 0.0], [1.0, 2.0, -0.5]])
        mesh = Mesh(nodes, [TimoshenkoBeam(0, 1, steel_props(normal=(0.0, 0.0, 1.0)))], [])
        K = mesh.stiffness.toarray()
        M = mesh.mass.toarray()

        np.testing.assert_allclose(K, K.T, rtol=1e-10, atol=1e-6 * np.abs(K).max())
        np.testing.assert_allclose(M, M.T, rtol=1e-10, atol=1e-10 * np.abs(M).max())

    def test_inverse_mass_inverts_mass_for_single_element(self):
        nodes = np.array([[0.0, 0.0, 0.0], [0.6, 0.8, 0.0]])
        mesh = Mesh(nodes, [TimoshenkoBeam(0, 1, steel_props(normal=(0.0, 0.0, 1.0)))], [])

        product = mesh.inv_mass.toarray() @ mesh.mass.toarray()
        np.testing.assert_allclose(product, np.eye(12), atol=1e-8)

    def test_mass_taken_directly_from_element(self):
        """An axis-aligned element scatters its consistent mass bit for bit."""
        nodes = np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0]])
        beam = EulerBernoulliBeam(0, 1, steel_props())
        mesh = Mesh(nodes, [beam], [])

        np.testing.assert_array_equal(mesh.mass.toarray(), beam.local_mass(nodes))


class TestBoundaryConditions:
    """Constrained DOFs become unit basis vectors in M⁻¹; K and M are untouched."""

    BCS = [BC(0, 0, 0.0, BCType.DISPLACEMENT), BC(1, 4, 0.0, BCType.DISPLACEMENT)]

    def test_constrained_rows_and_columns_are_unit_vectors(self):
        mesh = make_three_element_frame(self.BCS)
        Minv = mesh.inv_mass.toarray()

        for bc in mesh.bcs:
            g = bc.global_index
            expected = np.zeros(24)
            expected[g] = 1.0
            np.testing.assert_array_equal(Minv[g, :], expected)
            np.testing.assert_array_equal(Minv[:, g], expected)

    def test_unconstrained_entries_unchanged(self):
        free = make_three_element_frame().inv_mass.toarray()
        fixed = make_three_element_frame(self.BCS).inv_mass.toarray()

        keep = np.setdiff1d(np.arange(24), [0, 10])
        np.testing.assert_allclose(fixed[np.ix_(keep, keep)], free[np.ix_(keep, keep)])

    def test_stiffness_and_mass_not_modified(self):
        free = make_three_element_frame()
        fixed = make_three_element_frame(self.BCS)

        np.testing.assert_allclose(fixed.stiffness.toarray(), free.stiffness.toarray())
        np.testing.assert_allclose(fixed.mass.toarray(), free.mass.toarray())

    def test_duplicate_bcs_on_same_dof(self):
        bcs = [BC(0, 0, 0.0), BC(0, 0, 0.0, BCType.VELOCITY)]
        mesh = make_three_element_frame(bcs)

        assert list(mesh.constrained_dofs) == [0]
        assert mesh.inv_mass[0, 0] == 1.0

    def test_bc_list_is_copied(self):
        bcs = list(self.BCS)
        mesh = make_three_element_frame(bcs)
        bcs.append(BC(3, 5, 0.0))

        assert len(mesh.bcs) == 2


class TestValidation:

    def test_element_referencing_missing_node(self):
        props = steel_props()
        with pytest.raises(ValueError, match="references node 2"):
            Mesh([(0, 0, 0), (1, 0, 0)], [EulerBernoulliBeam(0, 2, props)], [])

    def test_bc_outside_model(self):
        props = steel_props()
        with pytest.raises(ValueError, match="outside the model"):
            Mesh([(0, 0, 0), (1, 0, 0)], [EulerBernoulliBeam(0, 1, props)], [BC(2, 0, 0.0)])

    def test_zero_length_element(self):
        with pytest.raises(ValueError, match="zero length"):
            Mesh([(0, 0, 0), (0, 0, 0)], [EulerBernoulliBeam(0, 1, steel_props())], [])

    def test_normal_parallel_to_axis(self):
        with pytest.raises(ValueError, match="parallel"):
            Mesh([(0, 0, 0), (0, 1, 0)], [EulerBernoulliBeam(0, 1, steel_props(normal=(0, 1, 0)))], [])

    def test_nodes_are_read_only(self):
        nodes = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        mesh = Mesh(nodes, [EulerBernoulliBeam(0, 1, steel_props())], [])

        nodes[1, 0] = 5.0  # caller's array is not aliased
        assert mesh.nodes[1, 0] == 1.0
        with pytest.raises(ValueError):
            mesh.nodes[0, 0] = 1.0
