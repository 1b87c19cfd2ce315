# === FILE: site_archiver/cli.py ===
#!/usr/bin/env python3
"""
Command-line entry point for SiteArchiver.

Usage:
  site-archiver [OPTIONS] BASE_URL OUTPUT_DIR

Crawls every page under BASE_URL through an already logged-in browser
session and stores each page as OUTPUT_DIR/<path>/<name>.webarchive and
OUTPUT_DIR/<path>/<name>.html.

Session options:
  --fetcher [browser|http]  Playwright browser (default) or plain HTTP with cookies
  --cdp-url URL             Attach to a running Chrome (e.g. http://localhost:9222)
  --user-data-dir DIR       Persistent browser profile with the session
  --storage-state FILE      Playwright storage-state JSON (cookies)

Crawl options:
  --delay SEC, --retries N, --max-pages N, --max-depth N, --link-parser [regex|soup]

Reports and logging:
  --json PATH, --html PATH, --log-level LEVEL, --log-file PATH

Example:
  site-archiver --cdp-url http://localhost:9222 https://intranet.example.com ./archive
"""
import asyncio
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_archiver import __version__
from site_archiver.archive import ArchiveWriter
from site_archiver.config import load_config
from site_archiver.engine import prepare_output_dir, start_crawl
from site_archiver.logger import init_logging
from site_archiver.report import render_html, render_json
from site_archiver.utils import normalize_url

PROG_NAME = "site-archiver"
CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


class ArchiverCommand(click.Command):
    """Bad invocations exit with status 1."""

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as exc:
            exc.exit_code = 1
            raise


@click.command(cls=ArchiverCommand, context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', prog_name=PROG_NAME, message='%(prog)s %(version)s')
@click.argument('base_url')
@click.argument('output_dir', type=click.Path(file_okay=False, path_type=Path))
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='YAML/JSON file with crawl and fetcher settings.'
)
@click.option('--delay', type=float, default=None, help='Pause between pages, seconds [default: 5].')
@click.option('--retries', type=int, default=None, help='Fetch attempts per page [default: 3].')
@click.option('--max-pages', type=int, default=None, help='Stop after this many pages.')
@click.option('--max-depth', type=int, default=None, help='Do not follow links deeper than this.')
@click.option('--link-parser', type=click.Choice(['regex', 'soup']), default=None, help='Link extraction method.')
@click.option('--fetcher', 'fetcher_kind', type=click.Choice(['browser', 'http']), default=None,
              help='How pages are fetched [default: browser].')
@click.option('--cdp-url', default=None, help='CDP endpoint of a running, logged-in Chrome.')
@click.option('--user-data-dir', default=None, type=click.Path(file_okay=False, path_type=Path),
              help='Persistent browser profile directory.')
@click.option('--storage-state', default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Playwright storage-state JSON with session cookies.')
@click.option('--headless/--headed', default=None, help='Run the launched browser without a window.')
@click.option('--json', '-j', 'json_output', default=None,
              type=click.Path(writable=True, dir_okay=False, path_type=Path), help='Save a JSON crawl report.')
@click.option('--html', 'html_output', default=None,
              type=click.Path(writable=True, dir_okay=False, path_type=Path), help='Save an HTML crawl report.')
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Also write logs to this file.'
)
def cli(base_url, output_dir, config_path, delay, retries, max_pages, max_depth, link_parser,
        fetcher_kind, cdp_url, user_data_dir, storage_state, headless, json_output, html_output,
        log_level, log_file):
    """Archive every page under BASE_URL into OUTPUT_DIR."""
    init_logging(level=log_level, log_file=log_file)

    try:
        cfg = load_config(
            config_path,
            base_url=base_url,
            output_dir=output_dir,
            delay=delay,
            max_pages=max_pages,
            max_depth=max_depth,
            link_parser=link_parser,
            fetcher={
                'kind': fetcher_kind,
                'retries': retries,
                'cdp_url': cdp_url,
                'user_data_dir': user_data_dir,
                'storage_state': storage_state,
                'headless': headless,
            },
        )
    except (ValidationError, ValueError, TypeError, OSError) as e:
        print_error(f'Invalid configuration: {e}')

    try:
        prepare_output_dir(cfg.output_dir)
    except OSError as e:
        print_error(f'Failed to create output directory: {e}')

    try:
        results = asyncio.run(start_crawl(cfg))
    except KeyboardInterrupt:
        print_error('Interrupted.')
    except Exception as e:
        print_error(f'Crawl failed: {e}')

    if json_output:
        try:
            click.echo(f'JSON report: {render_json(results, json_output)}')
        except OSError as e:
            print_error(f'Failed to save JSON report: {e}')

    if html_output:
        writer = ArchiveWriter(cfg.output_dir, normalize_url(str(cfg.base_url)))
        try:
            click.echo(f'HTML report: {render_html(results, html_output, writer)}')
        except OSError as e:
            print_error(f'Failed to save HTML report: {e}')

    click.echo('Crawling completed.')


def main() -> None:
    cli(prog_name=PROG_NAME)


if __name__ == "__main__":
    main()
