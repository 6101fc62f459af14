"""Plot how removing each species changes total energy flux in the web.

For every species s, the web without s is rebuilt (row, column and
attributes dropped together) and its equilibrium fluxes solved. Bars show
the total flux relative to the intact web.

Usage:
    python scripts/plot_species_removal.py --out notes/fig_removal.png --temperature 12
"""

from __future__ import annotations

import argparse

import numpy as np
import matplotlib.pyplot as plt

from foodweb_flux.datasets import example_web, load_collection
from foodweb_flux.metabolism import MassScalingLoss, TemperatureScalingLoss
from foodweb_flux.scenario import removal_scenarios


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--out", required=True)
    ap.add_argument("--data", default=None, help=".npz species collection (default: example web)")
    ap.add_argument("--temperature", type=float, default=None,
                    help="temperature (C); omit for mass-only losses")
    args = ap.parse_args()

    web = example_web() if args.data is None else load_collection(args.data)
    model = MassScalingLoss() if args.temperature is None else TemperatureScalingLoss()

    scen = removal_scenarios(web, model, temperature=args.temperature)
    base = scen.pop("baseline")
    labels = [k.removeprefix("without ") for k in scen]
    rel = np.array([sc.total_flux / base.total_flux for sc in scen.values()])

    for lab, r in zip(labels, rel):
        print(f"  without {lab:<12} total flux x {r:.3f}")

    fig, ax = plt.subplots(figsize=(6.4, 4.0))
    colors = np.where(base.collection.basal_mask(), "#6a994e", "#386fa4")
    ax.bar(np.arange(len(rel)), rel, color=colors)
    ax.axhline(1.0, color="k", lw=1.0, ls="--")
    ax.set_xticks(np.arange(len(rel)))
    ax.set_xticklabels(labels, rotation=60, ha="right")
    ax.set_ylabel("total flux / intact web")
    ax.set_title("Species removal")
    ax.grid(True, axis="y", alpha=0.25)

    fig.tight_layout()
    fig.savefig(args.out, dpi=200)
    print(f"Wrote: {args.out}")

    svg_out = args.out.replace(".png", ".svg")
    fig.savefig(svg_out, format="svg", bbox_inches="tight")
    print(f"Wrote: {svg_out}")


if __name__ == "__main__":
    main()
