"""Rich-powered interactive wizard for configuring DCC toy-model runs."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.theme import Theme

from ..runtime import resolve_window

_THEME = Theme(
    {
        "accent": "bright_cyan",
        "muted": "grey70",
        "warning": "gold1",
        "success": "spring_green2",
    }
)

_console = Console(theme=_THEME)


def _prompt_int(message: str, default: int, *, minimum: Optional[int] = None) -> int:
    while True:
        response = Prompt.ask(message, default=str(default), console=_console)
        try:
            value = int(response)
        except ValueError:
            _console.print("[warning]Please enter a whole number.[/warning]")
            continue
        if minimum is not None and value < minimum:
            _console.print(f"[warning]Value must be at least {minimum}.[/warning]")
            continue
        return value


def _prompt_float(
    message: str,
    default: float,
    *,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    inclusive: bool = True,
) -> float:
    while True:
        response = Prompt.ask(message, default=f"{default}", console=_console)
        try:
            value = float(response)
        except ValueError:
            _console.print("[warning]Please enter a numeric value.[/warning]")
            continue
        too_low = minimum is not None and (value < minimum if inclusive else value <= minimum)
        too_high = maximum is not None and (value > maximum if inclusive else value >= maximum)
        if too_low or too_high:
            bracket = ("[", "]") if inclusive else ("(", ")")
            _console.print(
                f"[warning]Value must lie in {bracket[0]}{minimum}, {maximum}{bracket[1]}.[/warning]"
            )
            continue
        return value


def _prompt_optional_int(message: str, default: Optional[int]) -> Optional[int]:
    default_label = "none" if default is None else str(default)
    response = Prompt.ask(message, default=default_label, console=_console)
    if response.strip().lower() in {"", "none", "null"}:
        return None
    try:
        return int(response)
    except ValueError:
        _console.print("[warning]Invalid integer; falling back to default.[/warning]")
        return default


def _prompt_choice(message: str, choices: Iterable[str], default: str) -> str:
    return Prompt.ask(
        message,
        choices=list(choices),
        default=default,
        console=_console,
        show_choices=True,
    )


def _summarise_configuration(data: dict[str, str]) -> None:
    table = Table(title="Configuration Summary", show_lines=False, expand=True)
    table.add_column("Setting", style="accent", no_wrap=True)
    table.add_column("Value", style="muted")
    for key, value in data.items():
        table.add_row(key, value)
    _console.print(table)


def run_interactive_wizard(args: argparse.Namespace) -> argparse.Namespace:
    _console.print(Panel.fit("[accent bold]Kaon DCC Toy Model Configurator[/accent bold]", border_style="accent"))
    _console.print(
        "Use the prompts below to tailor the simulation. Press [accent]<enter>[/accent] to accept defaults.",
        style="muted",
    )

    events = _prompt_int("Events per configuration", args.events, minimum=1)
    kaon_fraction = _prompt_float(
        "Kaon fraction", args.kaon_fraction, minimum=0.0, maximum=1.0, inclusive=False
    )
    scan = _prompt_choice("Parameter scan", ["none", "multiplicity", "dcc"], args.scan)

    dcc_fraction = args.dcc_fraction
    min_mult, max_mult = args.min_mult, args.max_mult
    if scan != "dcc":
        dcc_fraction = _prompt_float("DCC fraction", args.dcc_fraction, minimum=0.0, maximum=1.0)
    if scan != "multiplicity":
        default_min, default_max = resolve_window(scan, args.min_mult, args.max_mult)
        min_mult = _prompt_float("Minimum multiplicity", default_min, minimum=0.0)
        max_mult = _prompt_float("Maximum multiplicity", max(default_max, min_mult + 1.0), minimum=min_mult)
        while max_mult <= min_mult:
            _console.print("[warning]Maximum multiplicity must exceed the minimum.[/warning]")
            max_mult = _prompt_float("Maximum multiplicity", min_mult + 1.0, minimum=min_mult)

    seed = _prompt_optional_int("Random seed (or 'none')", args.seed)
    rounding = _prompt_choice("DCC split rounding", ["truncate", "nearest", "stochastic"], args.rounding)
    precision = _prompt_choice("Floating point precision", ["float64", "float32"], args.precision)

    workers = args.workers
    if scan == "none":
        workers = _prompt_int("Parallel workers (1 = sequential)", args.workers, minimum=1)

    show = Confirm.ask("Show plots window?", default=args.show, console=_console)
    save_plots = Confirm.ask("Save plots to disk?", default=not args.no_save, console=_console)
    if save_plots:
        save_dir = Path(Prompt.ask("Directory for saved plots", default=str(args.save_dir), console=_console)).expanduser()
        no_save = False
    else:
        save_dir = args.save_dir
        no_save = True

    hist_bins = args.hist_bins
    if scan == "none":
        hist_bins = _prompt_int("Multiplicity histogram bins", args.hist_bins, minimum=1)

    summary_data = {
        "Events": f"{events}",
        "Kaon fraction": f"{kaon_fraction}",
        "Scan": scan,
        "DCC fraction": "scanned" if scan == "dcc" else f"{dcc_fraction}",
        "Multiplicity": "scanned" if scan == "multiplicity" else f"[{min_mult}, {max_mult})",
        "Seed": "random" if seed is None else f"{seed}",
        "Rounding": rounding,
        "Precision": precision,
        "Workers": f"{workers}",
        "Show window": "Yes" if show else "No",
        "Save plots": "Yes" if not no_save else "No",
    }
    _summarise_configuration(summary_data)

    return argparse.Namespace(
        events=events,
        kaon_fraction=kaon_fraction,
        dcc_fraction=dcc_fraction,
        min_mult=min_mult,
        max_mult=max_mult,
        seed=seed,
        rounding=rounding,
        precision=precision,
        scan=scan,
        workers=workers,
        vectorized=args.vectorized,
        debug=args.debug,
        hist_bins=hist_bins,
        save_dir=save_dir,
        no_save=no_save,
        show=show,
        interactive=False,
    )
