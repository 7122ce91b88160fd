#!/usr/bin/env python3
"""
Multi-seed sweep of the latency SLA for the cost-aware entry point.

Uses Common Random Numbers (CRN): for every seed the same sessions, brokers
and latency table are dispatched under each SLA threshold. Reports mean and
95% confidence interval per metric, writes per-seed results to JSON and
summary statistics to CSV, and optionally plots acceptance / SLA
satisfaction / P95 latency against the threshold.

Usage:
    python sla_sweep.py                          # Default: 20 seeds, default SLAs
    python sla_sweep.py --seeds 50               # Override number of seeds
    python sla_sweep.py --slas 25 50 100 200     # Custom thresholds
    python sla_sweep.py --plot                   # Also write sla_sweep.png
"""
import argparse
import csv
import json
from datetime import datetime

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

import metrics
from cloud import BrokerRegistry
from entry_points.cost_aware import CostAwareEntryPoint
from events import DBLayerOverloaded, EventLog
from simulator import Simulator
from workload import generate_brokers, generate_latency_table, generate_sessions

DEBUG = False

APP_ID = 1
DEFAULT_SLA_VALUES = [20, 40, 60, 80, 120, 160]
CLIENT_IPS = ["10.0.{}.1".format(i) for i in range(8)]

scenario = {
    "name": "Default",
    "num_sessions": 400,
    "arrival_rate": 40,
    "period": 1.0,
    "horizon": 30,
    "p_untagged": 0.02,
}

METRIC_NAMES = ["acceptance", "sla_satisfaction", "mean_latency", "p95_latency", "db_overloaded"]


def parse_args():
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Latency SLA sweep for the cost-aware entry point (CRN, multi-seed)",
    )
    parser.add_argument('--seeds', type=int, default=20,
                        help='Number of seeds to run (default: 20)')
    parser.add_argument('--base-seed', type=int, default=42,
                        help='Base seed; seeds run from base_seed to base_seed+N-1 (default: 42)')
    parser.add_argument('--slas', type=float, nargs='+', default=DEFAULT_SLA_VALUES,
                        help='Latency SLA thresholds to sweep')
    parser.add_argument('--output', default='sla_sweep',
                        help='Output prefix for the .json/.csv (and .png) files')
    parser.add_argument('--plot', action='store_true',
                        help='Write a matplotlib figure of the sweep')
    return parser.parse_args()


def run_single_trial(latency_sla, seed):
    """Run one seed under one SLA. Workload is regenerated from the seed (CRN)."""
    sessions = generate_sessions(
        num_sessions=scenario["num_sessions"],
        arrival_rate=scenario["arrival_rate"],
        client_ips=CLIENT_IPS,
        p_untagged=scenario["p_untagged"],
        seed=seed,
    )
    brokers = generate_brokers(app_id=APP_ID, seed=seed)
    latencies = generate_latency_table(brokers, CLIENT_IPS, app_id=APP_ID, seed=seed)

    events = EventLog(debug=DEBUG)
    entry_point = CostAwareEntryPoint(latencies, APP_ID, latency_sla, BrokerRegistry(brokers), events=events)
    sim = Simulator(entry_point, sessions, period=scenario["period"], debug=DEBUG)
    sim.run(horizon=scenario["horizon"])

    return {
        "acceptance": metrics.acceptance_rate(sessions),
        "sla_satisfaction": metrics.sla_satisfaction(sessions, latency_sla),
        "mean_latency": metrics.mean_latency(sessions),
        "p95_latency": metrics.p95_latency(sessions),
        "db_overloaded": len(events.of_type(DBLayerOverloaded)) / max(1, len(sim.outcomes)),
        "broker_share": metrics.broker_share(sessions),
    }


def mean_ci(values, ci=0.95):
    """Mean with a normal-approximation confidence interval. Returns (mean, lower, upper)."""
    data = np.asarray(values, dtype=float)
    mean = float(np.mean(data))
    if len(data) < 2:
        return mean, mean, mean
    std_err = float(np.std(data, ddof=1) / np.sqrt(len(data)))
    z = 1.96 if ci == 0.95 else 2.576
    return mean, mean - z * std_err, mean + z * std_err


def summarize(results, slas):
    rows = []
    for sla in slas:
        for metric in METRIC_NAMES:
            values = [trial[metric] for trial in results[str(sla)]]
            mean, lower, upper = mean_ci(values)
            rows.append({
                "SLA": sla,
                "Metric": metric,
                "Mean": mean,
                "CILower": lower,
                "CIUpper": upper,
                "Median": float(np.median(values)),
            })
    return rows


def plot_sweep(rows, path):
    fig, axes = plt.subplots(1, 3, figsize=(14, 4))
    panels = [
        ("acceptance", "Acceptance rate"),
        ("sla_satisfaction", "SLA satisfaction"),
        ("p95_latency", "P95 latency"),
    ]
    for ax, (metric, title) in zip(axes, panels):
        data = [r for r in rows if r["Metric"] == metric]
        x = [r["SLA"] for r in data]
        y = [r["Mean"] for r in data]
        lower = [r["CILower"] for r in data]
        upper = [r["CIUpper"] for r in data]
        ax.plot(x, y, marker='o', color='#d62728')
        ax.fill_between(x, lower, upper, color='#d62728', alpha=0.2)
        ax.set_title(title)
        ax.set_xlabel("Latency SLA")
        ax.grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)


def main():
    args = parse_args()
    seeds = list(range(args.base_seed, args.base_seed + args.seeds))
    slas = list(args.slas)

    print(f"Running {len(seeds)} seeds x {len(slas)} SLA thresholds")
    results = {}
    for sla in slas:
        results[str(sla)] = [run_single_trial(sla, seed) for seed in seeds]
        accept = np.mean([t["acceptance"] for t in results[str(sla)]])
        within = np.mean([t["sla_satisfaction"] for t in results[str(sla)]])
        print(f"  SLA={sla:>7.1f}  acceptance={accept:.3f}  within SLA={within:.3f}")

    rows = summarize(results, slas)

    with open(f"{args.output}.json", 'w') as f:
        json.dump({
            "generated": datetime.now().isoformat(),
            "scenario": scenario,
            "seeds": seeds,
            "results": results,
        }, f, indent=2)

    with open(f"{args.output}.csv", 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=["SLA", "Metric", "Mean", "CILower", "CIUpper", "Median"])
        writer.writeheader()
        writer.writerows(rows)

    print(f"✓ Wrote {args.output}.json and {args.output}.csv")

    if args.plot:
        plot_sweep(rows, f"{args.output}.png")
        print(f"✓ Wrote {args.output}.png")


if __name__ == "__main__":
    main()
