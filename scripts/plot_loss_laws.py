"""Plot the two metabolic loss laws against body mass.

  mass scaling:         X = 0.71 * M^-0.25
  temperature scaling:  X = 0.88 * M^0.75 * exp(-0.63 / (kB * T))

The temperature law is drawn for several temperatures on its own axis
since its magnitude is ~1e-12 of the mass-only law.
"""

from __future__ import annotations

import argparse

import numpy as np
import matplotlib.pyplot as plt

from foodweb_flux.metabolism import mass_scaling_loss, temperature_scaling_loss


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--out", required=True)
    ap.add_argument("--temperatures", type=float, nargs="+", default=[0.0, 10.0, 20.0, 30.0])
    args = ap.parse_args()

    M = np.logspace(-9, 2, 200)

    fig, axes = plt.subplots(1, 2, figsize=(9, 3.8))
    ax = axes[0]
    ax.loglog(M, mass_scaling_loss(M), color="k", lw=2.0)
    ax.set_xlabel("body mass M")
    ax.set_ylabel("loss rate X")
    ax.set_title(r"$X = 0.71\,M^{-0.25}$")
    ax.grid(True, which="both", alpha=0.25)

    ax = axes[1]
    cmap = plt.get_cmap("coolwarm")
    n = len(args.temperatures)
    for k, T in enumerate(args.temperatures):
        ax.loglog(M, temperature_scaling_loss(M, T), color=cmap(k / max(n - 1, 1)), lw=2.0, label=f"{T:g} C")
    ax.set_xlabel("body mass M")
    ax.set_title(r"$X = 0.88\,M^{0.75}\,e^{-E/k_BT}$")
    ax.grid(True, which="both", alpha=0.25)
    ax.legend(frameon=False)

    fig.tight_layout()
    fig.savefig(args.out, dpi=200)
    print(f"Wrote: {args.out}")

    svg_out = args.out.replace(".png", ".svg")
    fig.savefig(svg_out, format="svg", bbox_inches="tight")
    print(f"Wrote: {svg_out}")


if __name__ == "__main__":
    main()
