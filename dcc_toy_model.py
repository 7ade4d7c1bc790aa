#!/usr/bin/env python3
"""CLI launcher for the kaon DCC toy model and its parameter scans."""
from __future__ import annotations

import argparse
from pathlib import Path
import sys

import matplotlib.pyplot as plt
from loguru import logger
from rich.console import Console
from rich.table import Table

from dcctoy import (
    DccModelError,
    FluctuationSummary,
    RATIO_FIELDS,
    ScanResult,
    SplitRounding,
    run_parallel,
    scan_dcc_fraction,
    scan_multiplicity,
)
from dcctoy.runtime import (
    build_config,
    build_recorder,
    create_simulation_context,
    fmt,
    precision_to_dtype,
    resolve_window,
)
from dcctoy.visualization import plot_correlation_map, plot_multiplicity_distributions, plot_scan
from dcctoy.ui.interactive import run_interactive_wizard


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Simulate kaon production with a DCC admixture and compute nu_dyn fluctuations.",
    )
    parser.add_argument("--events", type=int, default=1000, help="Events per configuration.")
    parser.add_argument("--kaon-fraction", type=float, default=0.3, help="Kaon fraction in (0, 1).")
    parser.add_argument("--dcc-fraction", type=float, default=0.9, help="DCC fraction in [0, 1].")
    parser.add_argument(
        "--min-mult",
        type=float,
        default=None,
        help="Lower edge of the multiplicity window (default 1, or 800 with --scan dcc; "
        "--scan multiplicity uses its own windows).",
    )
    parser.add_argument(
        "--max-mult",
        type=float,
        default=None,
        help="Upper edge of the multiplicity window (default 200, or 1000 with --scan dcc).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Optional RNG seed.")
    parser.add_argument(
        "--rounding",
        choices=[policy.value for policy in SplitRounding],
        default=SplitRounding.TRUNCATE.value,
        help="Rounding applied to the DCC share of each event's kaons.",
    )
    parser.add_argument(
        "--precision",
        choices=("float32", "float64"),
        default="float64",
        help="Floating point precision of the random deviates.",
    )
    parser.add_argument(
        "--scan",
        choices=("none", "multiplicity", "dcc"),
        default="none",
        help="Scan multiplicity windows (1..1001) or DCC fraction (0..1 in the --min-mult/--max-mult window).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker processes for a single run (sums and histograms merged before finalizing).",
    )
    parser.add_argument(
        "--vectorized",
        action="store_true",
        help="Generate events in tensor batches (same distributions, different draw order).",
    )
    parser.add_argument("--debug", action="store_true", help="Log every generated event.")
    parser.add_argument(
        "--hist-bins",
        type=int,
        default=400,
        help="Number of unit-width bins for multiplicity histograms.",
    )
    parser.add_argument(
        "--save-dir",
        type=Path,
        default=Path("figures"),
        help="Directory where plots are saved (if not disabled).",
    )
    parser.add_argument("--no-save", action="store_true", help="Skip saving plot images to disk.")
    parser.add_argument("--show", action="store_true", help="Display plots interactively.")
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Launch a rich interactive CLI wizard to choose simulation options.",
    )
    return parser.parse_args(argv)


def _summary_table(summary: FluctuationSummary, title: str) -> Table:
    table = Table(title=title, expand=False)
    table.add_column("Observable", style="bright_cyan", no_wrap=True)
    table.add_column("Value", justify="right")
    for name in RATIO_FIELDS:
        table.add_row(name, fmt(summary.ratios[name]))
    return table


def _scan_table(scan: ScanResult) -> Table:
    table = Table(title=f"Scan over {scan.variable}", expand=False)
    table.add_column(scan.variable, style="bright_cyan", justify="right")
    for name in RATIO_FIELDS:
        table.add_column(name, justify="right")
    for point in scan.points:
        table.add_row(f"{point.value:g}", *(fmt(point.summary.ratios[name]) for name in RATIO_FIELDS))
    return table


def _save(fig: plt.Figure, path: Path, saved_paths: list[Path]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=150, bbox_inches="tight")
    saved_paths.append(path)


def _run_scan(args: argparse.Namespace, log) -> tuple[ScanResult, list[plt.Figure], dict[str, plt.Figure]]:
    rounding = SplitRounding(args.rounding)
    dtype = precision_to_dtype(args.precision)
    if args.scan == "multiplicity":
        if args.min_mult is not None or args.max_mult is not None:
            log("Multiplicity scan uses fixed windows; --min-mult/--max-mult are ignored.")
        scan = scan_multiplicity(
            kaon_fraction=args.kaon_fraction,
            dcc_fraction=args.dcc_fraction,
            n_events=args.events,
            seed=args.seed,
            rounding=rounding,
            vectorized=args.vectorized,
            dtype=dtype,
        )
    else:
        min_mult, max_mult = resolve_window(args.scan, args.min_mult, args.max_mult)
        scan = scan_dcc_fraction(
            kaon_fraction=args.kaon_fraction,
            min_mult=min_mult,
            max_mult=max_mult,
            n_events=args.events,
            seed=args.seed,
            rounding=rounding,
            vectorized=args.vectorized,
            dtype=dtype,
        )

    for point in scan.points:
        log(
            f"{scan.variable}={point.value:g}: "
            f"nu_dyn_ch0={fmt(point.summary.ratios['nu_dyn_ch0'])} "
            f"nu_dyn_ch0s={fmt(point.summary.ratios['nu_dyn_ch0s'])}"
        )

    named: dict[str, plt.Figure] = {}
    if not args.no_save or args.show:
        if args.scan == "multiplicity":
            fig_nu, _ = plot_scan(scan)
            fig_r, _ = plot_scan(scan, ratios=("r_cc", "r_0s0s", "r_c0s"))
            named = {"DccToyModel_nudync0VsMult.png": fig_nu, "DccToyModel_RVsMult.png": fig_r}
        else:
            fig_nu, _ = plot_scan(scan, ylim=(0.0, 2.0))
            named = {"DccToyModel_nudync0VsDccFraction.png": fig_nu}
    return scan, list(named.values()), named


def execute_simulation(args: argparse.Namespace, *, suppress_output: bool = False) -> dict:
    messages: list[str] = []
    saved_paths: list[Path] = []
    console = Console()

    def log(message: str = "") -> None:
        messages.append(message)
        if not suppress_output:
            print(message)

    save_dir = args.save_dir.expanduser()
    figures: list[plt.Figure] = []

    if args.scan != "none":
        scan, figures, named = _run_scan(args, log)
        if not suppress_output:
            console.print(_scan_table(scan))
        if not args.no_save:
            for filename, fig in named.items():
                _save(fig, save_dir / filename, saved_paths)
        result = None
        summary = None
    else:
        scan = None
        min_mult, max_mult = resolve_window(args.scan, args.min_mult, args.max_mult)
        if args.workers > 1:
            config = build_config(
                kaon_fraction=args.kaon_fraction,
                dcc_fraction=args.dcc_fraction,
                min_mult=min_mult,
                max_mult=max_mult,
                rounding=args.rounding,
            )
            recorder = build_recorder(args.hist_bins)
            result = run_parallel(
                config,
                args.events,
                n_workers=args.workers,
                seed=args.seed,
                vectorized=args.vectorized,
                dtype=precision_to_dtype(args.precision),
                recorder=recorder,
                debug=args.debug,
            )
        else:
            context = create_simulation_context(
                kaon_fraction=args.kaon_fraction,
                dcc_fraction=args.dcc_fraction,
                min_mult=min_mult,
                max_mult=max_mult,
                rounding=args.rounding,
                precision=args.precision,
                seed=args.seed,
                record_histograms=True,
                hist_bins=args.hist_bins,
                debug=args.debug,
                save_dir=save_dir,
            )
            config = context.config
            recorder = context.recorder
            if args.vectorized:
                result = context.simulator.run_batched(args.events)
            else:
                result = context.simulator.run(args.events)
        summary = result.summary

        log("Simulation complete")
        log(f"Events: {summary.n_events}")
        log(f"Kaon fraction: {fmt(config.kaon_fraction)}")
        log(f"DCC fraction: {fmt(config.dcc_fraction)}")
        log(f"Multiplicity window: [{config.min_mult:g}, {config.max_mult:g})")
        log(f"Split rounding: {config.rounding.value}")
        if args.workers > 1:
            log(f"Workers: {args.workers}")
        log("")
        for category in ("total", "binomial", "dcc"):
            averages = summary.averages[category]
            log(
                f"<k>_{category}={fmt(averages.k)} <k0>={fmt(averages.k0)} "
                f"<k0s>={fmt(averages.k0s)} <kc>={fmt(averages.kc)}"
            )
        log("")
        for name in RATIO_FIELDS:
            log(f"{name}: {fmt(summary.ratios[name])}")
        for name, reason in summary.undefined.items():
            log(f"  {name} undefined ({reason})")
        if not suppress_output:
            console.print(_summary_table(summary, config.base_name.rstrip("_")))

        if recorder is not None and (not args.no_save or args.show):
            fig_mult, _ = plot_multiplicity_distributions(recorder)
            normalized = recorder.normalized()
            fig_k0, _ = plot_correlation_map(normalized.kc_vs_k0, ylabel="k0")
            fig_k0s, _ = plot_correlation_map(normalized.kc_vs_k0s, ylabel="k0s")
            figures.extend([fig_mult, fig_k0, fig_k0s])
            if not args.no_save:
                prefix = config.base_name
                _save(fig_mult, save_dir / f"{prefix}KaonMultDist.png", saved_paths)
                _save(fig_k0, save_dir / f"{prefix}k0Vskc.png", saved_paths)
                _save(fig_k0s, save_dir / f"{prefix}k0sVskc.png", saved_paths)

    if saved_paths:
        log("")
        log("Saved:")
        for path in saved_paths:
            log(f"  {path}")

    if args.show:
        plt.show()
    else:
        for fig in figures:
            plt.close(fig)

    return {
        "result": result,
        "summary": summary,
        "scan": scan,
        "messages": messages,
        "saved_paths": saved_paths,
    }


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    auto_interactive = (argv is None and len(sys.argv) == 1) and sys.stdin.isatty() and sys.stdout.isatty()
    if getattr(args, "interactive", False) or auto_interactive:
        args = run_interactive_wizard(args)

    if not args.debug:
        logger.remove()
        logger.add(sys.stderr, level="WARNING")

    try:
        execute_simulation(args)
    except DccModelError as exc:
        raise SystemExit(f"error: {exc}") from exc


if __name__ == "__main__":
    main()
