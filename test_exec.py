from types import SimpleNamespace
from pathlib import Path

from dcc_toy_model import execute_simulation

ns = SimpleNamespace(
    events=10000,
    kaon_fraction=0.3,
    dcc_fraction=0.9,
    min_mult=1.0,
    max_mult=200.0,
    seed=42,
    rounding='truncate',
    precision='float64',
    scan='none',
    workers=1,
    vectorized=False,
    debug=False,
    hist_bins=400,
    save_dir=Path('figures'),
    no_save=True,
    show=False,
    interactive=False,
)

res = execute_simulation(ns, suppress_output=True)
summary = res['summary']
print(summary.averages['total'])
print(summary.ratios)
print(summary.nu_dyn_ch0, summary.nu_dyn_ch0s)
