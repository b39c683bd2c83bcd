#!/usr/bin/env python3
# =============================================================================
#     File: band_chol_perf.py
#  Created: 2025-07-19 09:12
#   Author: Bernie Roesler
#
"""
Compare the performance of the blocked and unblocked band Cholesky
factorizations with scipy's banded Cholesky.
"""
# =============================================================================

import matplotlib.pyplot as plt
import numpy as np
import timeit

from collections import defaultdict
from pathlib import Path

from scipy import linalg as la

import bandchol


SAVE_FIG = False

SEED = 565656

filestem = 'band_chol_perf'

# -----------------------------------------------------------------------------
#         Create the data
# -----------------------------------------------------------------------------
Ns = [100, 200, 500, 1000, 2000]
kd_frac = 0.1  # bandwidth as a fraction of N

N_repeats = 3  # number of "runs" in %timeit (7 is default)
N_samples = 1  # number of samples in each run (100,000 is default)

times = defaultdict(list)

rng = np.random.default_rng(SEED)


def blocked(uplo, N, kd, ab, ldab):
    return bandchol.band_cholesky(uplo, N, kd, ab.copy(), ldab)


def unblocked(uplo, N, kd, ab, ldab):
    return bandchol.band_cholesky_unblocked(uplo, N, kd, ab.copy(), ldab)


def scipy_banded(uplo, N, kd, ab, ldab):
    # Row-major upper storage is column-major lower storage
    return la.cholesky_banded(ab.reshape(N, ldab).T, lower=True,
                              check_finite=False)


chol_funcs = [blocked, unblocked, scipy_banded]

for N in Ns:
    kd = max(1, int(kd_frac * N))
    ldab = kd + 1
    ab = bandchol.random_band_matrix('U', N, kd, ldab, rng=rng)

    print(f"---------- N = {N:6,d}, kd = {kd:4d} ----------")

    for func in chol_funcs:
        func_name = func.__name__

        ts = timeit.repeat(lambda: func('U', N, kd, ab, ldab),
                           repeat=N_repeats, number=N_samples)

        ts = np.array(ts) / N_samples  # time per loop
        ts_min = np.min(ts)

        times[func_name].append(ts_min)

        print(f"{func_name}: {ts_min:.4g} s per loop, "
              f"({N_repeats} runs, {N_samples} loops each)")

# -----------------------------------------------------------------------------
#         Plot the data
# -----------------------------------------------------------------------------
fig, ax = plt.subplots(num=1, clear=True)
fig.set_size_inches(6.4, 4.8, forward=True)
for key, val in times.items():
    ax.plot(Ns, val, '.-', label=key)

ax.set_xscale('log')
ax.set_yscale('log')
ax.grid(which='both')
ax.legend()

ax.set_xlabel('Matrix Order N')
ax.set_ylabel('Time (s)')
ax.set_title(f"Band Cholesky, kd = {kd_frac} N")

if SAVE_FIG:
    fig_fullpath = Path(f"../plots/{filestem}.png")
    fig.savefig(fig_fullpath)
    print(f"Saved figure to {fig_fullpath}.")

plt.show()

# =============================================================================
# =============================================================================
