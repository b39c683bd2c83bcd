#!/usr/bin/env python3
# =============================================================================
#     File: utils.py
#  Created: 2025-07-15 10:03
#   Author: Bernie Roesler
#
"""
Utility functions for the bandchol module.
"""
# =============================================================================

import numpy as np

from .level3 import Uplo
from ._reconstruct import band_product
from ._storage import check_band_shape


def random_band_factor(uplo, N, kd, ldab=None, dtype=np.float64, rng=None):
    """Create a random triangular band factor with a positive diagonal.

    Every element of the buffer, including padding, is drawn from a standard
    normal distribution, then the diagonal is set to values in ``[2, 3)``.

    Parameters
    ----------
    uplo : str or Uplo
        ``'U'`` or ``'L'``.
    N, kd : int
        Order and bandwidth of the factor.
    ldab : int, optional
        Row stride. Defaults to ``kd + 1``.
    dtype : dtype, optional
        ``np.float64`` (default) or a complex type.
    rng : int or np.random.Generator, optional
        Random seed or generator.

    Returns
    -------
    ab : (N * ldab,) ndarray
        Band storage of the factor.
    """
    rng = np.random.default_rng(rng)
    ldab = kd + 1 if ldab is None else ldab

    if np.issubdtype(dtype, np.complexfloating):
        ab = (rng.standard_normal(N * ldab)
              + 1j * rng.standard_normal(N * ldab)) / np.sqrt(2)
        ab = ab.astype(dtype)
    else:
        ab = rng.standard_normal(N * ldab).astype(dtype)

    uplo = check_band_shape(uplo, N, kd, ab, ldab)
    d = 0 if uplo is Uplo.UPPER else kd
    ab[d::ldab][:N] = 2 + rng.random(N)

    return ab


def random_band_matrix(uplo, N, kd, ldab=None, dtype=np.float64, rng=None):
    r"""Create a random symmetric or Hermitian positive definite band matrix.

    The matrix is built as :math:`U^H U` or :math:`L L^H` from the factor
    returned by :func:`random_band_factor`, so it is positive definite by
    construction.

    Returns
    -------
    ab : (N * ldab,) ndarray
        Band storage of the matrix. Padding elements are random.
    """
    ldab = kd + 1 if ldab is None else ldab
    ab = random_band_factor(uplo, N, kd, ldab, dtype=dtype, rng=rng)
    band_product(uplo, N, kd, ab, ldab)
    return ab


# =============================================================================
# =============================================================================
