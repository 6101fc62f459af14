#!/usr/bin/env python3
"""
Generate all figures in both PNG and SVG formats.

This script runs all the figure-generating scripts and produces:
- PNG files (for web/preview)
- SVG files (for publication)

Usage:
    python scripts/generate_all_figures.py --outdir notes
"""

import argparse
import subprocess
import sys
from pathlib import Path


def run_script(script_path, args):
    """Run a Python script with given arguments."""
    cmd = [sys.executable, str(script_path)] + args
    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, capture_output=True, text=True)
    if result.returncode != 0:
        print(f"  ERROR: {result.stderr}")
    else:
        print(f"  OK")
    return result.returncode == 0


def main():
    parser = argparse.ArgumentParser(description="Generate all figures")
    parser.add_argument('--outdir', type=str, default='notes')
    parser.add_argument('--data', type=str, default=None,
                        help='.npz species collection (default: example web)')
    parser.add_argument('--cold', type=float, default=4.0)
    parser.add_argument('--warm', type=float, default=20.0)
    args = parser.parse_args()

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    scripts_dir = Path(__file__).parent
    data_args = [] if args.data is None else ['--data', args.data]

    print("=" * 70)
    print("Generating all figures (PNG + SVG)")
    print("=" * 70)

    # List of (script, arguments)
    figure_scripts = [
        ('plot_loss_laws.py',
         ['--out', str(outdir / 'fig_loss_laws.png')]),

        ('plot_temperature_scenarios.py',
         ['--out', str(outdir / 'fig_temperature_scenarios.png'),
          '--cold', str(args.cold), '--warm', str(args.warm)] + data_args),

        ('plot_species_removal.py',
         ['--out', str(outdir / 'fig_species_removal_mass.png')] + data_args),

        ('plot_species_removal.py',
         ['--out', str(outdir / 'fig_species_removal_warm.png'),
          '--temperature', str(args.warm)] + data_args),
    ]

    success_count = 0
    for script_name, script_args in figure_scripts:
        script_path = scripts_dir / script_name
        if not script_path.exists():
            print(f"\nSkipping {script_name} (not found)")
            continue

        print(f"\n--- {script_name} ---")
        if run_script(script_path, script_args):
            success_count += 1

    print("\n" + "=" * 70)
    print(f"Completed: {success_count}/{len(figure_scripts)} scripts")
    print("=" * 70)

    # List all generated files
    print("\nGenerated files:")
    for f in sorted(outdir.glob('*')):
        if f.is_file():
            size_kb = f.stat().st_size / 1024
            print(f"  {f.name:50} ({size_kb:.1f} KB)")


if __name__ == '__main__':
    main()
