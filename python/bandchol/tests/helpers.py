#!/usr/bin/env python3
# =============================================================================
#     File: helpers.py
#  Created: 2025-07-16 09:12
#   Author: Bernie Roesler
#
"""Helper functions for the bandchol python tests."""
# =============================================================================

import pytest

import numpy as np

import bandchol


# Matrix orders covering the unblocked code path, and both sides of the
# default block size of 32 in the blocked code path.
GRID_NS = [0, 1, 2, 3, 4, 5, 64, 65, 66, 91, 96, 97, 101, 128, 130]


# -----------------------------------------------------------------------------
#         Parameter Generators
# -----------------------------------------------------------------------------
def generate_band_params(Ns=GRID_NS, padding=7):
    """Generate (uplo, N, kd, ldab) for every valid band shape in the grid.

    Bandwidths of ``(5*N + 1) // 4`` and above are not valid band matrices
    (``kd >= N``), and are skipped.
    """
    for N in Ns:
        kds = sorted({0, (N + 1) // 4, (3*N - 1) // 4, (5*N + 1) // 4})
        for kd in kds:
            if kd < 0 or (N > 0 and kd >= N):
                continue
            for uplo in ['U', 'L']:
                for ldab in [kd + 1, kd + 1 + padding]:
                    yield pytest.param(
                        uplo, N, kd, ldab,
                        id=f"uplo={uplo},N={N},kd={kd},ldab={ldab}",
                        marks=pytest.mark.grid
                    )


def generate_random_band_shapes(seed=565656, N_trials=50, N_max=40):
    """Generate random (uplo, N, kd, ldab, nb) with ``1 < nb <= kd``.

    These force the blocked code path with small, arbitrary block sizes.
    """
    rng = np.random.default_rng(seed)
    for trial in range(N_trials):
        N = int(rng.integers(3, N_max, endpoint=True))
        kd = int(rng.integers(2, N - 1, endpoint=True))
        nb = int(rng.integers(2, kd, endpoint=True))
        ldab = kd + 1 + int(rng.integers(0, 3, endpoint=True))
        uplo = rng.choice(['U', 'L'])
        yield pytest.param(
            str(uplo), N, kd, ldab, nb,
            id=f"random_{trial:02d}::{uplo},N={N},kd={kd},"
               f"ldab={ldab},nb={nb}",
            marks=pytest.mark.random
        )


# -----------------------------------------------------------------------------
#         Band Matrix Helpers
# -----------------------------------------------------------------------------
def stored_entries(uplo, N, kd, ab, ldab):
    """Return the stored triangle of a band matrix as a flat array."""
    return ab[:N*ldab][bandchol.band_mask(uplo, N, kd, ldab)]


def padding_entries(uplo, N, kd, ab, ldab):
    """Return the entries of `ab` that are not part of the band."""
    mask = bandchol.band_mask(uplo, N, kd, ldab, size=ab.size)
    return ab[~mask]


def factor_dense(uplo, N, kd, ab, ldab):
    """Expand a band factor into a dense triangular matrix."""
    return bandchol.band_to_dense(uplo, N, kd, ab, ldab, hermitian=False)

# =============================================================================
# =============================================================================
