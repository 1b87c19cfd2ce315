# site_archiver/__init__.py
"""
SiteArchiver package initializer.
Defines package version; the CLI lives in :mod:`site_archiver.cli`.
"""
__version__ = "5.2.5"
