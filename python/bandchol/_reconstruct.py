#!/usr/bin/env python3
# =============================================================================
#     File: _reconstruct.py
#  Created: 2025-07-15 09:41
#   Author: Bernie Roesler
#
"""
Reconstruct a symmetric or Hermitian band matrix from its triangular factor.
"""
# =============================================================================

import numpy as np

from .level3 import Diag, NumpyBlas, Transpose, Uplo
from ._storage import band_block, check_band_shape


def band_product(uplo, N, kd, ab, ldab, *, backend=None):
    r"""Compute a band matrix from its triangular band factor, in place.

    .. math::
        A = U^H U \quad \text{if uplo == 'U'}, \qquad
        A = L L^H \quad \text{if uplo == 'L'}

    The factor is read from `ab` and `A` overwrites it in the same band
    storage. This is the inverse of :func:`band_cholesky`.

    The rows are processed from last to first, so that every row of the
    factor is read before it is overwritten.

    Parameters
    ----------
    uplo : str or Uplo
        ``'U'`` if `ab` holds an upper factor `U`, ``'L'`` for a lower
        factor `L`.
    N : int
        Order of the matrix.
    kd : int
        Number of super- or sub-diagonals.
    ab : (K,) ndarray
        Band storage buffer, overwritten with the result.
    ldab : int
        Row stride of `ab`, ``ldab >= kd + 1``.
    backend : NumpyBlas, optional
        Kernel provider. A new :class:`NumpyBlas` is used by default.

    Raises
    ------
    InvalidDimension
        If the shape parameters are inconsistent.
    """
    uplo = check_band_shape(uplo, N, kd, ab, ldab)
    bi = NumpyBlas() if backend is None else backend

    cplx = np.iscomplexobj(ab)
    kld = max(1, ldab - 1)

    if uplo is Uplo.UPPER:
        for k in range(N - 1, -1, -1):
            klen = min(kd, N - k - 1)  # number of stored off-diagonal elements
            row = ab[k*ldab:k*ldab + klen + 1]
            ukk = np.conj(row[0])

            # Add the outer product of row k of U into rows k+1 through k+klen
            if klen > 0:
                A22 = band_block(ab, (k + 1)*ldab, klen, klen, kld)
                if cplx:
                    bi.her(Uplo.UPPER, 1.0, row[1:].conj(), A22)
                else:
                    bi.syr(Uplo.UPPER, 1.0, row[1:], A22)

            bi.scal(ukk, row)
    else:
        for k in range(N - 1, -1, -1):
            kc = max(0, kd - k)  # index of the first valid element in the row
            klen = kd - kc       # number of stored off-diagonal elements
            row = ab[k*ldab + kc:k*ldab + kd + 1]

            # The [k, k] element
            ab[k*ldab + kd] = bi.dotc(row, row).real

            # The rest of row k: x := L[k-klen:k, k-klen:k] @ x
            if klen > 0:
                L11 = band_block(ab, (k - klen)*ldab + kd, klen, klen, kld)
                x = row[:klen]
                if cplx:
                    x[:] = x.conj()
                bi.trmv(Uplo.LOWER, Transpose.NO_TRANS, Diag.NON_UNIT, L11, x)
                if cplx:
                    x[:] = x.conj()


# =============================================================================
# =============================================================================
