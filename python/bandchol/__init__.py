#!/usr/bin/env python3
# =============================================================================
#     File: __init__.py
#  Created: 2025-07-14 10:15
#   Author: Bernie Roesler
#
"""
bandchol: Cholesky factorization of symmetric and Hermitian positive definite
band matrices.

Example usage:
    import numpy as np
    import bandchol

    N, kd = 5, 2
    ab = bandchol.random_band_matrix('U', N, kd, rng=565656)
    A = ab.copy()

    ok = bandchol.band_cholesky('U', N, kd, ab, kd + 1)  # ab holds U
    bandchol.band_product('U', N, kd, ab, kd + 1)         # ab holds U^T U
    np.testing.assert_allclose(ab, A)

Author: Bernie Roesler
Date: 2025-07-14
Version: 0.1
"""
# =============================================================================

import logging

from .level3 import (Diag, InvalidDimension, NumpyBlas, Side, Transpose,
                     Uplo)
from ._storage import (band_block, band_mask, band_max_diff, band_to_dense,
                       check_band_shape, dense_to_band)
from ._reconstruct import band_product
from ._factor import (NBMAX, DEFAULT_BLOCK_SIZE, NotPositiveDefinite,
                      band_cholesky, band_cholesky_unblocked,
                      cholesky_banded_factor, dense_cholesky_unblocked,
                      tuned_block_size)
from ._solve import band_cholesky_solve, band_triangular_solve
from .utils import random_band_factor, random_band_matrix

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    'Diag',
    'InvalidDimension',
    'NumpyBlas',
    'Side',
    'Transpose',
    'Uplo',
    'band_block',
    'band_mask',
    'band_max_diff',
    'band_to_dense',
    'check_band_shape',
    'dense_to_band',
    'band_product',
    'NBMAX',
    'DEFAULT_BLOCK_SIZE',
    'NotPositiveDefinite',
    'band_cholesky',
    'band_cholesky_unblocked',
    'cholesky_banded_factor',
    'dense_cholesky_unblocked',
    'tuned_block_size',
    'band_cholesky_solve',
    'band_triangular_solve',
    'random_band_factor',
    'random_band_matrix',
]

# =============================================================================
# =============================================================================
