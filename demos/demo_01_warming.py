#!/usr/bin/env python3
"""
Demo 1: Energy fluxes of a soil food web under warming
======================================================

Web: detritus and algae at the base, microbes, micro- and mesofauna,
spiders and centipedes on top (see foodweb_flux.datasets.example_web).

Steps:
  1. mass-only losses          X = 0.71 M^-0.25
  2. temperature-scaled losses X = 0.88 M^0.75 exp(-E / kB T), cold vs warm
  3. drop rare species (ln B < threshold) and compare
  4. stability of the warm equilibrium and the self-regulation it needs
"""

import argparse
import logging

import numpy as np
import matplotlib.pyplot as plt
from pathlib import Path

from foodweb_flux.datasets import example_web
from foodweb_flux.flux import make_stability, stability_value
from foodweb_flux.metabolism import MassScalingLoss, TemperatureScalingLoss
from foodweb_flux.scenario import build_scenario, compare_scenarios, temperature_scenarios


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument('--out', default='notes/demo_warming.png')
    parser.add_argument('--svg', action='store_true', help='Also save SVG')
    parser.add_argument('--threshold', type=float, default=0.0)
    parser.add_argument('--growth-rate', type=float, default=0.5)
    parser.add_argument('-v', '--verbose', action='store_true')
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    outdir = Path(args.out).parent
    outdir.mkdir(exist_ok=True)

    print("=" * 60)
    print("Demo 1: soil food web under warming")
    print("=" * 60)

    web = example_web()
    print(f"\nSpecies ({web.n}): {', '.join(web.names)}")

    # 1. mass-only
    basal = build_scenario("mass-only", web, MassScalingLoss())
    print(f"\nMass-only losses: total flux {basal.total_flux:.4g}")

    # 2. cold vs warm
    scen = temperature_scenarios(web, {"cold": 4.0, "warm": 20.0}, TemperatureScalingLoss())
    cold, warm = scen["cold"], scen["warm"]
    print(f"Cold (4 C):  total flux {cold.total_flux:.4g}")
    print(f"Warm (20 C): total flux {warm.total_flux:.4g}")
    print(f"Warming multiplies every flux by {warm.total_flux / cold.total_flux:.3f}")

    # 3. rare species removed
    common = web.filter_by_biomass(args.threshold)
    warm_common = build_scenario("warm, common only", common, TemperatureScalingLoss(), 20.0)
    dropped = sorted(set(web.names) - set(common.names))
    print(f"\nln(B) >= {args.threshold:g} drops: {', '.join(dropped) or 'nothing'}")

    names, table = compare_scenarios([cold, warm, warm_common])
    print(f"\n{'species':<12}{'cold':>12}{'warm':>12}{'warm/common':>14}")
    for nm, row in zip(names, table):
        cells = "".join(f"{v:>12.3e}" if np.isfinite(v) else f"{'-':>12}" for v in row[:2])
        last = f"{row[2]:>14.3e}" if np.isfinite(row[2]) else f"{'-':>14}"
        print(f"{nm:<12}{cells}{last}")

    # 4. stability
    coll = warm.collection
    lam = stability_value(warm.fluxes, coll.biomasses, coll.losses, coll.efficiencies,
                          growth_rate=args.growth_rate, mat=coll.mat)
    s = make_stability(warm.fluxes, coll.biomasses, coll.losses, coll.efficiencies,
                       growth_rate=args.growth_rate, mat=coll.mat)
    print(f"\nWarm equilibrium: max Re(eigenvalue) = {lam:.3e}")
    print(f"Self-regulation needed for stability: s = {s:.3g}")

    fig, ax = plt.subplots(figsize=(6, 4.5))
    x = np.arange(len(names))
    ax.semilogy(x, table[:, 0], 'o-', color='#3b6fb6', label='cold')
    ax.semilogy(x, table[:, 1], 's-', color='#d1495b', label='warm')
    ax.semilogy(x, table[:, 2], 'x', color='k', label='warm, common only')
    ax.set_xticks(x)
    ax.set_xticklabels(names, rotation=60, ha='right')
    ax.set_ylabel('outgoing flux')
    ax.set_title('Flux leaving each species')
    ax.legend(fontsize=9)
    ax.grid(True, alpha=0.25)

    plt.tight_layout()
    plt.savefig(args.out, dpi=150, bbox_inches='tight')
    print(f"\nSaved: {args.out}")

    if args.svg:
        svg_out = args.out.replace('.png', '.svg')
        plt.savefig(svg_out, format='svg', bbox_inches='tight')
        print(f"Saved: {svg_out}")

    plt.close()


if __name__ == '__main__':
    main()
