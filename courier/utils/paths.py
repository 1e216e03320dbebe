"""Centralized path definitions for the Courier application.

This module provides a single source of truth for all application paths,
preventing duplication and making path configuration easier to maintain.
"""

from pathlib import Path

# Base application directory
COURIER_DIR = Path.home() / ".courier"

# Subdirectories
LOGS_DIR = COURIER_DIR / "logs"
DRAFTS_DIR = COURIER_DIR / "drafts"

# Specific files
CONFIG_PATH = COURIER_DIR / "config.json"
SHELL_HISTORY_PATH = COURIER_DIR / "shell_history.txt"
