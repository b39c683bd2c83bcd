#!/usr/bin/env python3
# =============================================================================
#     File: _factor.py
#  Created: 2025-07-15 14:12
#   Author: Bernie Roesler
#
"""
Cholesky factorization of symmetric or Hermitian positive definite band
matrices, with an unblocked and a blocked (right-looking) algorithm.

The internal routines return a LAPACK-style `info` integer: 0 on success, or
``j + 1`` if the leading minor of order ``j + 1`` is not positive definite.
"""
# =============================================================================

import logging

import numpy as np

from numpy.linalg import LinAlgError

from .level3 import Diag, InvalidDimension, NumpyBlas, Side, Transpose, Uplo
from ._storage import band_block, check_band_shape

logger = logging.getLogger(__name__)

NBMAX = 32               # largest block size chosen by tuned_block_size
DEFAULT_BLOCK_SIZE = 32


class NotPositiveDefinite(LinAlgError):
    """Raised when a band matrix has a non-positive pivot.

    Attributes
    ----------
    info : int
        The order of the leading minor that is not positive definite.
    """

    def __init__(self, info):
        self.info = info
        super().__init__(f"The leading minor of order {info} is not "
                         "positive definite.")


def tuned_block_size(N, kd):
    """Choose the block size for :func:`band_cholesky`.

    Parameters
    ----------
    N, kd : int
        Order and bandwidth of the matrix.

    Returns
    -------
    nb : int
        Block size. The blocked algorithm is only used if ``1 < nb <= kd``.
    """
    return min(DEFAULT_BLOCK_SIZE, NBMAX)


# -----------------------------------------------------------------------------
#         Unblocked kernels
# -----------------------------------------------------------------------------
def _potf2(uplo, A, bi):
    """Unblocked Cholesky factorization of a dense block, in place.

    `A` may be a strided view into band storage; only the `uplo` triangle is
    read or written.
    """
    N = A.shape[0]

    if uplo is Uplo.UPPER:
        for j in range(N):
            u = A[:j, j]
            ajj = A[j, j].real - bi.dotc(u, u).real
            if not ajj > 0:  # also catches NaN
                return j + 1
            ajj = np.sqrt(ajj)
            A[j, j] = ajj
            if j < N - 1:
                # A[j, j+1:] -= A[:j, j+1:]^T @ conj(A[:j, j])
                if j > 0:
                    bi.gemv(Transpose.TRANS, -1.0, A[:j, j+1:], u.conj(),
                            1.0, A[j, j+1:])
                bi.scal(1 / ajj, A[j, j+1:])
    else:
        for j in range(N):
            l = A[j, :j]
            ajj = A[j, j].real - bi.dotc(l, l).real
            if not ajj > 0:
                return j + 1
            ajj = np.sqrt(ajj)
            A[j, j] = ajj
            if j < N - 1:
                # A[j+1:, j] -= A[j+1:, :j] @ conj(A[j, :j])
                if j > 0:
                    bi.gemv(Transpose.NO_TRANS, -1.0, A[j+1:, :j], l.conj(),
                            1.0, A[j+1:, j])
                bi.scal(1 / ajj, A[j+1:, j])

    return 0


def _pbtf2(uplo, N, kd, ab, ldab, bi):
    """Unblocked band Cholesky factorization, one pivot at a time."""
    cplx = np.iscomplexobj(ab)
    kld = max(1, ldab - 1)

    if uplo is Uplo.UPPER:
        # A = U^H U
        for j in range(N):
            ajj = ab[j*ldab].real
            if not ajj > 0:
                return j + 1
            ajj = np.sqrt(ajj)
            ab[j*ldab] = ajj

            # Row j of U, then update the trailing window within the band
            kn = min(kd, N - j - 1)
            if kn > 0:
                u = ab[j*ldab + 1:j*ldab + 1 + kn]
                bi.scal(1 / ajj, u)
                A22 = band_block(ab, (j + 1)*ldab, kn, kn, kld)
                if cplx:
                    bi.her(Uplo.UPPER, -1.0, u.conj(), A22)
                else:
                    bi.syr(Uplo.UPPER, -1.0, u, A22)
    else:
        # A = L L^H
        for j in range(N):
            ajj = ab[j*ldab + kd].real
            if not ajj > 0:
                return j + 1
            ajj = np.sqrt(ajj)
            ab[j*ldab + kd] = ajj

            # Column j of L is stored down an anti-diagonal of the buffer
            kn = min(kd, N - j - 1)
            if kn > 0:
                start = (j + 1)*ldab + kd - 1
                l = ab[start:start + (kn - 1)*kld + 1:kld]
                bi.scal(1 / ajj, l)
                A22 = band_block(ab, (j + 1)*ldab + kd, kn, kn, kld)
                if cplx:
                    bi.her(Uplo.LOWER, -1.0, l, A22)
                else:
                    bi.syr(Uplo.LOWER, -1.0, l, A22)

    return 0


# -----------------------------------------------------------------------------
#         Blocked driver
# -----------------------------------------------------------------------------
def _pbtrf(uplo, N, kd, ab, ldab, nb, bi):
    """Band Cholesky factorization, blocked if ``1 < nb <= kd``."""
    if nb <= 1 or kd < nb:
        logger.debug("band_cholesky: unblocked, N=%d, kd=%d", N, kd)
        return _pbtf2(uplo, N, kd, ab, ldab, bi)

    logger.debug("band_cholesky: blocked, N=%d, kd=%d, nb=%d", N, kd, nb)

    cplx = np.iscomplexobj(ab)
    rank_k = bi.herk if cplx else bi.syrk
    ct = Transpose.CONJ_TRANS if cplx else Transpose.TRANS
    nt = Transpose.NO_TRANS
    kld = ldab - 1

    # Process the band one diagonal block at a time. With the diagonal block
    # A11 just factorized, the blocks to be updated are
    #
    #     A11  A12  A13              A11
    #          A22  A23     or       A21  A22
    #               A33              A31  A32  A33
    #
    # of sizes ib, i2, i3. A13 (A31) is triangular, its other triangle lies
    # outside of the band, so it is updated in a separate work array.
    for i in range(0, N, nb):
        ib = min(nb, N - i)

        if uplo is Uplo.UPPER:
            A11 = band_block(ab, i*ldab, ib, ib, kld)
        else:
            A11 = band_block(ab, i*ldab + kd, ib, ib, kld)

        info = _potf2(uplo, A11, bi)
        if info > 0:
            return i + info

        if i + ib >= N:
            break

        i2 = min(kd - ib, N - i - ib)
        i3 = min(ib, N - i - kd)

        if uplo is Uplo.UPPER:
            if i2 > 0:
                A12 = band_block(ab, i*ldab + ib, ib, i2, kld)
                A22 = band_block(ab, (i + ib)*ldab, i2, i2, kld)
                bi.trsm(Side.LEFT, uplo, ct, Diag.NON_UNIT, 1.0, A11, A12)
                rank_k(uplo, ct, -1.0, A12, 1.0, A22)

            if i3 > 0:
                A13 = band_block(ab, i*ldab + kd, ib, i3, kld)
                idx = np.tril_indices(ib, 0, i3)
                work = np.zeros((ib, i3), dtype=ab.dtype)
                work[idx] = A13[idx]

                bi.trsm(Side.LEFT, uplo, ct, Diag.NON_UNIT, 1.0, A11, work)

                if i2 > 0:
                    A23 = band_block(ab, (i + ib)*ldab + kd - ib, i2, i3, kld)
                    bi.gemm(ct, nt, -1.0, A12, work, 1.0, A23)

                A33 = band_block(ab, (i + kd)*ldab, i3, i3, kld)
                rank_k(uplo, ct, -1.0, work, 1.0, A33)

                A13[idx] = work[idx]
        else:
            if i2 > 0:
                A21 = band_block(ab, (i + ib)*ldab + kd - ib, i2, ib, kld)
                A22 = band_block(ab, (i + ib)*ldab + kd, i2, i2, kld)
                bi.trsm(Side.RIGHT, uplo, ct, Diag.NON_UNIT, 1.0, A11, A21)
                rank_k(uplo, nt, -1.0, A21, 1.0, A22)

            if i3 > 0:
                A31 = band_block(ab, (i + kd)*ldab, i3, ib, kld)
                idx = np.triu_indices(i3, 0, ib)
                work = np.zeros((i3, ib), dtype=ab.dtype)
                work[idx] = A31[idx]

                bi.trsm(Side.RIGHT, uplo, ct, Diag.NON_UNIT, 1.0, A11, work)

                if i2 > 0:
                    A32 = band_block(ab, (i + kd)*ldab + ib, i3, i2, kld)
                    bi.gemm(nt, ct, -1.0, work, A21, 1.0, A32)

                A33 = band_block(ab, (i + kd)*ldab + kd, i3, i3, kld)
                rank_k(uplo, nt, -1.0, work, 1.0, A33)

                A31[idx] = work[idx]

    return 0


# -----------------------------------------------------------------------------
#         Public interface
# -----------------------------------------------------------------------------
def _resolve_block_size(N, kd, block_size):
    if block_size is None:
        return tuned_block_size(N, kd)
    if block_size < 1:
        raise InvalidDimension(f"block_size must be positive, "
                               f"got {block_size}.")
    return int(block_size)


def band_cholesky(uplo, N, kd, ab, ldab, *, block_size=None, backend=None):
    r"""Compute the Cholesky factorization of a band matrix, in place.

    .. math::
        A = U^H U \quad \text{if uplo == 'U'}, \qquad
        A = L L^H \quad \text{if uplo == 'L'}

    where `A` is a symmetric (real) or Hermitian (complex) positive definite
    band matrix. The pivots are eliminated in order from first to last.

    Parameters
    ----------
    uplo : str or Uplo
        ``'U'`` if `ab` holds the upper triangle of `A`, ``'L'`` for the
        lower triangle.
    N : int
        Order of the matrix.
    kd : int
        Number of super- or sub-diagonals, ``kd < N`` if ``N > 0``.
    ab : (K,) ndarray
        Band storage buffer, overwritten with the factor. See
        :func:`band_to_dense` for the layout.
    ldab : int
        Row stride of `ab`, ``ldab >= kd + 1``.
    block_size : int, optional
        Block size of the blocked algorithm. The unblocked algorithm is used if
        ``block_size <= 1`` or ``block_size > kd``. Defaults to
        :func:`tuned_block_size`.
    backend : NumpyBlas, optional
        Kernel provider. A new :class:`NumpyBlas` is used by default.

    Returns
    -------
    ok : bool
        True if the factorization succeeded. False if a pivot was not
        positive, in which case `A` is not positive definite and `ab` holds a
        partial result.

    Raises
    ------
    InvalidDimension
        If the shape parameters are inconsistent.

    See also
    --------
    band_product : Reconstruct `A` from its factor.
    cholesky_banded_factor : Raise instead of returning False.
    """
    uplo = check_band_shape(uplo, N, kd, ab, ldab)
    nb = _resolve_block_size(N, kd, block_size)
    bi = NumpyBlas() if backend is None else backend

    info = _pbtrf(uplo, N, kd, ab, ldab, nb, bi)

    if info > 0:
        logger.debug("band_cholesky: pivot %d is not positive", info - 1)

    return info == 0


def band_cholesky_unblocked(uplo, N, kd, ab, ldab, *, backend=None):
    """Compute the Cholesky factorization of a band matrix, unblocked.

    Identical to :func:`band_cholesky` with ``block_size=1``.

    Returns
    -------
    ok : bool
        True if the factorization succeeded.
    """
    uplo = check_band_shape(uplo, N, kd, ab, ldab)
    bi = NumpyBlas() if backend is None else backend
    return _pbtf2(uplo, N, kd, ab, ldab, bi) == 0


def dense_cholesky_unblocked(uplo, A, *, backend=None):
    """Compute the unblocked Cholesky factorization of a dense block, in place.

    Only the `uplo` triangle of `A` is referenced, so `A` may be a view
    returned by :func:`band_block`.

    Parameters
    ----------
    uplo : str or Uplo
        ``'U'`` or ``'L'``.
    A : (N, N) ndarray
        Symmetric or Hermitian positive definite matrix.
    backend : NumpyBlas, optional
        Kernel provider.

    Returns
    -------
    ok : bool
        True if the factorization succeeded.
    """
    uplo = Uplo(str(getattr(uplo, 'value', uplo)).upper())
    if np.ndim(A) != 2 or A.shape[0] != A.shape[1]:
        raise InvalidDimension(f"A must be square, got shape {np.shape(A)}.")
    bi = NumpyBlas() if backend is None else backend
    return _potf2(uplo, A, bi) == 0


def cholesky_banded_factor(uplo, N, kd, ab, ldab, *, overwrite_ab=False,
                           block_size=None, backend=None):
    """Compute the Cholesky factor of a band matrix, raising on failure.

    Parameters
    ----------
    uplo, N, kd, ab, ldab
        As in :func:`band_cholesky`.
    overwrite_ab : bool, optional
        If True, factor `ab` in place. Otherwise (default) a copy is made.
    block_size : int, optional
        Block size, see :func:`band_cholesky`.
    backend : NumpyBlas, optional
        Kernel provider.

    Returns
    -------
    result : (K,) ndarray
        The triangular band factor.

    Raises
    ------
    NotPositiveDefinite
        If `A` is not positive definite.
    InvalidDimension
        If the shape parameters are inconsistent.
    """
    uplo = check_band_shape(uplo, N, kd, ab, ldab,
                            writeable=overwrite_ab)
    nb = _resolve_block_size(N, kd, block_size)
    bi = NumpyBlas() if backend is None else backend

    if not overwrite_ab:
        ab = ab.copy()

    info = _pbtrf(uplo, N, kd, ab, ldab, nb, bi)

    if info > 0:
        raise NotPositiveDefinite(info)

    return ab


# =============================================================================
# =============================================================================
