#!/usr/bin/env python3
"""
analyze_range_log.py - Offline analysis of range-hold test logs
Reads range_log_*.csv (RNFN rows) and reports how the corrupted rangefinder
stream compares with the true range, then plots both against the seafloor.

Usage:
    python logs/analyze_range_log.py                  # latest log in logs/
    python logs/analyze_range_log.py range_log_x.csv --output range.png
"""

import argparse
import csv
import glob
import os
import sys
import traceback

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

ROW_NAME = 'RNFN'
COLUMNS = ['time_s', 'sub_z', 'bottom_z', 'true_rngfnd', 'rngfnd']
DEFAULT_OUTLIER_THRESHOLD_M = 3.0


def safe_float(value, default=float('nan')):
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def find_latest_range_log(folder="logs"):
    files = sorted(glob.glob(os.path.join(folder, "range_log_*.csv")), key=os.path.getmtime, reverse=True)
    if files:
        print(f"Found latest range log: {os.path.basename(files[0])}")
        return files[0]
    print("No range logs found")
    return None


def load_range_log(csv_file):
    """Load the RNFN rows of a range log as numpy arrays keyed by column"""
    rows = {key: [] for key in COLUMNS}
    with open(csv_file, newline='') as f:
        reader = csv.DictReader(f)
        for row in reader:
            if row.get('name') != ROW_NAME:
                continue
            for key in COLUMNS:
                rows[key].append(safe_float(row.get(key)))
    return {key: np.array(values, dtype=float) for key, values in rows.items()}


def estimate_delay_ticks(data, max_lag=50):
    """Lag (in rows) that best aligns the corrupted stream with the true range"""
    true_r = data['true_rngfnd']
    meas = data['rngfnd']
    n = len(true_r)
    if n < 2:
        return 0

    best_lag, best_err = 0, float('inf')
    for lag in range(min(max_lag, n - 1) + 1):
        err = np.median(np.abs(meas[lag:] - true_r[:n - lag]))
        if err < best_err:
            best_lag, best_err = lag, err
    return best_lag


def summarize(data, outlier_threshold_m=DEFAULT_OUTLIER_THRESHOLD_M):
    """Error statistics of the corrupted range against the true range"""
    n = len(data['time_s'])
    if n == 0:
        return {'samples': 0}

    lag = estimate_delay_ticks(data)
    true_r = data['true_rngfnd'][:n - lag]
    meas = data['rngfnd'][lag:]
    error = meas - true_r
    outliers = np.abs(error) > outlier_threshold_m
    inliers = error[~outliers]

    return {
        'samples': n,
        'duration_s': float(data['time_s'][-1] - data['time_s'][0]),
        'delivered': int(np.sum(data['rngfnd'] > 0)),
        'delay_ticks': lag,
        'outlier_count': int(np.sum(outliers)),
        'outlier_fraction': float(np.mean(outliers)) if len(error) else 0.0,
        'noise_mean_m': float(np.mean(inliers)) if len(inliers) else float('nan'),
        'noise_std_m': float(np.std(inliers)) if len(inliers) else float('nan'),
        'rms_error_m': float(np.sqrt(np.mean(error ** 2))) if len(error) else float('nan'),
        'true_range_min_m': float(np.min(data['true_rngfnd'])),
        'true_range_max_m': float(np.max(data['true_rngfnd'])),
    }


def print_summary(stats):
    print("\n" + "=" * 70)
    print("RANGE LOG SUMMARY")
    print("=" * 70)
    if not stats.get('samples'):
        print("No RNFN rows found")
        return
    print(f"Samples:          {stats['samples']} over {stats['duration_s']:.1f}s "
          f"({stats['delivered']} delivered)")
    print(f"Estimated delay:  {stats['delay_ticks']} ticks")
    print(f"Outliers:         {stats['outlier_count']} ({stats['outlier_fraction'] * 100:.2f}%)")
    print(f"Noise:            mean {stats['noise_mean_m']:.3f}m, std {stats['noise_std_m']:.3f}m")
    print(f"RMS error:        {stats['rms_error_m']:.3f}m")
    print(f"True range:       {stats['true_range_min_m']:.2f}m .. {stats['true_range_max_m']:.2f}m")
    print("=" * 70 + "\n")


def plot_range_log(data, output_file="range_log.png"):
    t = data['time_s'] - data['time_s'][0] if len(data['time_s']) else data['time_s']

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(14, 8), sharex=True)
    fig.suptitle("Range Hold Test - Synthetic Rangefinder", fontsize=14, fontweight="bold")

    ax1.plot(t, data['sub_z'], 'b-', lw=1.5, label="Vehicle altitude")
    ax1.plot(t, data['bottom_z'], 'k-', lw=1.5, label="Seafloor")
    ax1.set_ylabel("Z (m)")
    ax1.legend(); ax1.grid(alpha=0.3)

    ax2.plot(t, data['rngfnd'], 'r.', ms=2, alpha=0.5, label="Rangefinder")
    ax2.plot(t, data['true_rngfnd'], 'g-', lw=1.5, label="True range")
    ax2.set_xlabel("Time (s)")
    ax2.set_ylabel("Range (m)")
    ax2.legend(); ax2.grid(alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_file, dpi=150); plt.close(fig)
    print(f"[PLOT] {output_file}")
    return output_file


def main(argv=None):
    parser = argparse.ArgumentParser(description='Analyze a range-hold test log')
    parser.add_argument('csv_file', nargs='?', help='Range log CSV (default: latest in logs/)')
    parser.add_argument('--output', default='range_log.png', help='Plot file')
    parser.add_argument('--outlier-threshold', type=float, default=DEFAULT_OUTLIER_THRESHOLD_M,
                        help='Error (m) above which a sample counts as an outlier')
    parser.add_argument('--no-plot', action='store_true')
    args = parser.parse_args(argv)

    try:
        csv_file = args.csv_file or find_latest_range_log()
        if not csv_file:
            return 1
        data = load_range_log(csv_file)
        stats = summarize(data, args.outlier_threshold)
        print_summary(stats)
        if stats['samples'] and not args.no_plot:
            plot_range_log(data, args.output)
        return 0
    except Exception as e:
        print(f"\n[ERROR] {e}")
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
