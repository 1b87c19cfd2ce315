"""
site_archiver.crawler: frontier, fetchers and link extraction.
"""
