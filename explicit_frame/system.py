# explicit_frame/system.py
"""
EXPLICIT DYNAMICS: Newmark Time Stepping of a Beam Frame
========================================================

PURPOSE:
--------
Advance nodal displacement u, velocity v and acceleration a of an
assembled mesh through time by solving

    M a + C v + K u = F(t),        C = α·M + β_d·K   (Rayleigh damping)

one step at a time.

ALGORITHM (one call to advance(dt)):
------------------------------------
    t1 = t0 + dt
    if dt changed:   L = M + γ·dt·C + β·dt²·K ;  factorize L
    F   = Σ external forces at t1
    RHS = F − C·(v0 + (1−γ)·dt·a0) − K·(u0 + dt·v0 + (0.5−β)·dt²·a0)
    apply BCs at t1 (RHS[g] = 0; hold u or v at the prescribed value)
    a1  = L⁻¹·RHS
    v1 += (1−γ)·dt·a0 + γ·dt·a1
    u0 += dt·v0 + dt²·(0.5−β)·a0 + dt²·β·a1
    v0, a0, t0 ← v1, a1, t1

WHY CACHE THE FACTORIZATION:
----------------------------
Factorizing L is by far the most expensive part of a step, and an
explicit run nearly always reuses the same dt. L is only rebuilt when
dt differs from the previous step's dt beyond a relative tolerance, so
a run at constant dt factorizes exactly once.

USAGE:
------
    system = ExplicitSystem(mesh, forces, u_init, v_init)
    dt = estimate_stable_timestep(nodes, elements)
    while ValueCompare().less_than(system.time, end_time):
        system.advance(dt)
    print(system.displacements)
"""

import logging
import numpy as np
from typing import Optional, Sequence, Tuple

from .config import IntegratorOptions
from .kernel.compare import ValueCompare
from .kernel.solve import FactorizedMatrix
from .kernel.sparse import prune_small
from .mesh import Mesh
from .prescribed import BCType, Force

logger = logging.getLogger(__name__)


def _read_only(vector: np.ndarray) -> np.ndarray:
    view = vector.view()
    view.flags.writeable = False
    return view


class ExplicitSystem:
    """
    Time integrator owning a mesh and the kinematic state of its nodes.

    Parameters:
    -----------
    mesh : Mesh
        Assembled mesh; its boundary conditions are applied every step
    forces : sequence of Force
        External nodal forces. Stored as a tuple; the list is fixed for the run.
    initial_displacements, initial_velocities : array-like, shape (6N,)
        Initial state, copied
    t0 : float
        Initial time
    options : IntegratorOptions, optional
        Newmark and damping parameters (defaults: β=0.25, γ=0.5, α=β_d=0.01)

    Raises:
    -------
    ValueError
        If the initial vectors differ in length, don't match the mesh's DOF
        count, or a force references a DOF outside the mesh
    """

    def __init__(
        self,
        mesh: Mesh,
        forces: Sequence[Force],
        initial_displacements,
        initial_velocities,
        t0: float = 0.0,
        options: Optional[IntegratorOptions] = None,
    ):
        self._mesh = mesh
        self._forces = tuple(forces)
        self.options = options if options is not None else IntegratorOptions()
        self.compare = ValueCompare()

        u = np.array(initial_displacements, dtype=float)
        v = np.array(initial_velocities, dtype=float)
        if u.ndim != 1 or v.ndim != 1:
            raise ValueError("Initial displacements and velocities must be 1-D vectors")
        if u.shape != v.shape:
            raise ValueError(
                f"Initial displacements ({u.size}) and velocities ({v.size}) differ in length"
            )
        if u.size != mesh.ndof:
            raise ValueError(
                f"Initial state has {u.size} entries but the mesh has {mesh.ndof} DOFs"
            )
        for force in self._forces:
            if not 0 <= force.global_index < mesh.ndof:
                raise ValueError(
                    f"Force on node {force.node}, DOF {force.dof} is outside the mesh's {mesh.ndof} DOFs"
                )

        n = mesh.ndof
        self._u0 = u
        self._v0 = v
        self._a0 = np.zeros(n)
        self._a1 = np.zeros(n)
        self._f = np.zeros(n)
        self._rhs = np.zeros(n)
        self._t0 = float(t0)
        self._dt = 0.0

        self._damping = prune_small(
            self.options.damping_alpha * mesh.mass + self.options.damping_beta * mesh.stiffness
        )
        self._lhs: Optional[FactorizedMatrix] = None
        self.factorization_count = 0

        self._apply_bcs(self._t0)
        # v1 accumulates increments across steps. It starts from v0, not from
        # zero, so a nonzero initial velocity reaches the first increment and
        # velocity-BC rows of the RHS carry the clamped value from step 2 on.
        self._v1 = self._v0.copy()

    def _assemble_lhs(self, dt: float) -> None:
        o = self.options
        M, C, K = self._mesh.mass, self._damping, self._mesh.stiffness
        L = prune_small(M + (o.gamma * dt) * C + (o.beta * dt * dt) * K)
        self._lhs = FactorizedMatrix(L)
        self.factorization_count += 1
        logger.debug("Factorized effective matrix for dt=%.6e (nnz=%d)", dt, L.nnz)

    def _apply_external_forces(self, t: float) -> None:
        self._f.fill(0.0)
        for force in self._forces:
            self._f[force.global_index] += force.get_value(t)

    def _apply_bcs(self, t: float) -> None:
        for bc in self._mesh.bcs:
            g = bc.global_index
            self._rhs[g] = 0.0
            if bc.bc_type == BCType.DISPLACEMENT:
                self._u0[g] = bc.get_value(t)
                self._v0[g] = 0.0
            elif bc.bc_type == BCType.VELOCITY:
                self._v0[g] = bc.get_value(t)

    def advance(self, dt: float) -> None:
        """
        Advance the state by one time step of size dt.

        Raises:
        -------
        ValueError
            If dt is not positive
        MechanismError
            If the effective matrix is singular or the solve is not finite
        """
        if not dt > 0.0:
            raise ValueError(f"Time step must be positive, got {dt}")

        o = self.options
        K, C = self._mesh.stiffness, self._damping
        u0, v0, a0 = self._u0, self._v0, self._a0

        t1 = self._t0 + dt
        if self._lhs is None or not self.compare.equal(dt, self._dt):
            self._assemble_lhs(dt)

        self._apply_external_forces(t1)
        self._rhs[:] = (
            self._f
            - C @ (v0 + (1.0 - o.gamma) * dt * a0)
            - K @ (u0 + dt * v0 + (0.5 - o.beta) * dt * dt * a0)
        )
        self._apply_bcs(t1)

        self._a1[:] = self._lhs.solve(self._rhs)
        a1 = self._a1

        self._v1 += (1.0 - o.gamma) * dt * a0 + o.gamma * dt * a1
        u0 += dt * v0 + dt * dt * (0.5 - o.beta) * a0 + dt * dt * o.beta * a1

        v0[:] = self._v1
        a0[:] = a1
        self._t0 = t1
        self._dt = dt

    @property
    def mesh(self) -> Mesh:
        return self._mesh

    @property
    def external_forces(self) -> Tuple[Force, ...]:
        return self._forces

    @property
    def displacements(self) -> np.ndarray:
        """Current nodal displacements u (read-only view)."""
        return _read_only(self._u0)

    @property
    def velocities(self) -> np.ndarray:
        """Current nodal velocities v (read-only view)."""
        return _read_only(self._v0)

    @property
    def accelerations(self) -> np.ndarray:
        """Current nodal accelerations a (read-only view)."""
        return _read_only(self._a0)

    @property
    def forces(self) -> np.ndarray:
        """
        Consistent nodal forces K·u + M·a.

        Internal forces at free DOFs and reactions at constrained DOFs;
        recomputed on each access.
        """
        return self._mesh.stiffness @ self._u0 + self._mesh.mass @ self._a0

    @property
    def time(self) -> float:
        return self._t0

    @property
    def time_step(self) -> float:
        """Step size of the most recent advance() (0.0 before the first step)."""
        return self._dt
