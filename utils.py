# utils.py
"""
Utility functions used across the interval matching system.
"""

import os
import sys
from datetime import datetime


def flush_print(*args, **kwargs):
    """Enable immediate output flushing for long searches."""
    print(*args, **kwargs)
    sys.stdout.flush()


def verbose_print(config, *args, **kwargs):
    """Print progress only when the run configuration asks for it (VERBOSE)."""
    if config and config.get("VERBOSE", False):
        flush_print(*args, **kwargs)


def create_output_folder(num_rules=0, num_intervals=0, strategy="match", base_dir=None):
    """
    Creates a unique output folder for this run.

    Folder naming: outputs/{YYYYMMDD}_{HHMMSS}_{strategy}_R{rules}_I{intervals}/

    Returns:
        str: Absolute path to the created output folder
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    folder_name = f"{timestamp}_{strategy}_R{num_rules}_I{num_intervals}"

    # Create outputs directory if it doesn't exist
    if base_dir is None:
        base_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "outputs")
    os.makedirs(base_dir, exist_ok=True)

    # Create the run-specific folder
    run_folder = os.path.join(base_dir, folder_name)
    os.makedirs(run_folder, exist_ok=True)

    return run_folder


def load_config(path='config.json'):
    """Load configuration from JSON file."""
    import json
    try:
        with open(path, 'r') as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        print(f"FATAL: Could not load or parse {path}. Error: {e}")
        sys.exit(1)
