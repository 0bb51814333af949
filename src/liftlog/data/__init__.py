"""Data loading utilities."""

from .plan_loader import DEFAULT_PLANS, Backup, dump_backup, load_backup, parse_backup

__all__ = ["Backup", "DEFAULT_PLANS", "dump_backup", "load_backup", "parse_backup"]
