#!/usr/bin/env python3
# =============================================================================
#     File: _solve.py
#  Created: 2025-07-18 16:30
#   Author: Bernie Roesler
#
"""
Triangular band solves, and the solution of :math:`Ax = b` given the band
Cholesky factor of `A`.
"""
# =============================================================================

import numpy as np

from .level3 import InvalidDimension, Transpose, Uplo
from ._storage import check_band_shape


def _check_rhs(N, ab, b):
    if not isinstance(b, np.ndarray) or b.ndim not in (1, 2):
        raise InvalidDimension("b must be a 1-D or 2-D numpy array.")
    if b.shape[0] != N:
        raise InvalidDimension(f"b must have {N} rows, got {b.shape[0]}.")
    if np.iscomplexobj(ab) and not np.iscomplexobj(b):
        raise TypeError("b must be complex when the factor is complex.")


def band_triangular_solve(uplo, trans, N, kd, ab, ldab, b):
    r"""Solve a triangular band system in place.

    .. math::
        op(T) x = b

    where `T` is the upper (``uplo == 'U'``) or lower (``uplo == 'L'``)
    triangular band matrix stored in `ab`, and :math:`op(T)` is :math:`T`,
    :math:`T^T` or :math:`T^H`.

    Parameters
    ----------
    uplo : str or Uplo
        ``'U'`` or ``'L'``.
    trans : str or Transpose
        ``'N'``, ``'T'`` or ``'C'``.
    N, kd : int
        Order and bandwidth of `T`.
    ab : (K,) ndarray
        Band storage of `T`.
    ldab : int
        Row stride of `ab`.
    b : (N,) or (N, K) ndarray
        Right-hand side(s), overwritten with the solution.

    Returns
    -------
    x : (N,) or (N, K) ndarray
        The solution, which is `b` itself.
    """
    uplo = check_band_shape(uplo, N, kd, ab, ldab, writeable=False)
    trans = Transpose(str(getattr(trans, 'value', trans)).upper())
    _check_rhs(N, ab, b)

    kld = max(1, ldab - 1)
    conj = np.conj if trans is Transpose.CONJ_TRANS else (lambda x: x)

    if uplo is Uplo.UPPER:
        if trans is Transpose.NO_TRANS:
            # Backward substitution along the rows of U
            for j in range(N - 1, -1, -1):
                m = min(kd, N - 1 - j)
                u = ab[j*ldab + 1:j*ldab + 1 + m]
                if m > 0:
                    b[j] -= u @ b[j + 1:j + 1 + m]
                b[j] /= ab[j*ldab]
        else:
            # Forward substitution down the columns of U
            for j in range(N):
                m = min(kd, j)
                if m > 0:
                    start = (j - m)*ldab + m
                    u = conj(ab[start:start + (m - 1)*kld + 1:kld])
                    b[j] -= u @ b[j - m:j]
                b[j] /= conj(ab[j*ldab])
    else:
        if trans is Transpose.NO_TRANS:
            # Forward substitution along the rows of L
            for j in range(N):
                m = min(kd, j)
                l = ab[j*ldab + kd - m:j*ldab + kd]
                if m > 0:
                    b[j] -= l @ b[j - m:j]
                b[j] /= ab[j*ldab + kd]
        else:
            # Backward substitution up the columns of L
            for j in range(N - 1, -1, -1):
                m = min(kd, N - 1 - j)
                if m > 0:
                    start = (j + 1)*ldab + kd - 1
                    l = conj(ab[start:start + (m - 1)*kld + 1:kld])
                    b[j] -= l @ b[j + 1:j + 1 + m]
                b[j] /= conj(ab[j*ldab + kd])

    return b


def band_cholesky_solve(uplo, N, kd, ab, ldab, b):
    """Solve :math:`Ax = b` given the band Cholesky factor of `A`, in place.

    Parameters
    ----------
    uplo : str or Uplo
        ``'U'`` if `ab` holds `U` with :math:`A = U^H U`, ``'L'`` if it holds
        `L` with :math:`A = L L^H`.
    N, kd : int
        Order and bandwidth of `A`.
    ab : (K,) ndarray
        The factor, as computed by :func:`band_cholesky`.
    ldab : int
        Row stride of `ab`.
    b : (N,) or (N, K) ndarray
        Right-hand side(s), overwritten with the solution.

    Returns
    -------
    x : (N,) or (N, K) ndarray
        The solution, which is `b` itself.
    """
    uplo = check_band_shape(uplo, N, kd, ab, ldab, writeable=False)
    _check_rhs(N, ab, b)

    if uplo is Uplo.UPPER:
        band_triangular_solve(uplo, Transpose.CONJ_TRANS, N, kd, ab, ldab, b)
        band_triangular_solve(uplo, Transpose.NO_TRANS, N, kd, ab, ldab, b)
    else:
        band_triangular_solve(uplo, Transpose.NO_TRANS, N, kd, ab, ldab, b)
        band_triangular_solve(uplo, Transpose.CONJ_TRANS, N, kd, ab, ldab, b)

    return b


# =============================================================================
# =============================================================================
