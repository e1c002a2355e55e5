import contextlib

import requests
from django.conf import settings
from django.core.cache import cache
from django.core.management.base import BaseCommand, CommandError

from results.exceptions import BatchWriteError
from results.pipeline import INGEST_LOCK_KEY, IngestStats, load_records, parse_records
from results.toppers import rebuild_toppers


@contextlib.contextmanager
def open_source(path=None, url=None):
    """Yield an iterator of JSONL lines from a local file or an HTTP URL; always released."""
    if url:
        try:
            resp = requests.get(url, timeout=30, stream=True)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise CommandError(f"Failed to fetch {url}: {e}")
        try:
            yield resp.iter_lines(decode_unicode=True)
        finally:
            resp.close()
    else:
        try:
            handle = open(path, "r", encoding="utf-8", errors="replace")
        except OSError as e:
            raise CommandError(f"Cannot open {path}: {e}")
        with handle:
            yield handle


class Command(BaseCommand):
    help = "Rebuild the results store from a JSONL file: normalize, rank, load and generate toppers"

    def add_arguments(self, parser):
        parser.add_argument("path", nargs="?", help="JSONL file, one exam record per line")
        parser.add_argument("--url", type=str, help="Fetch the JSONL file over HTTP instead of reading a path")
        parser.add_argument("--batch-size", type=int, default=None, help="Rows per write transaction (default 500)")
        parser.add_argument(
            "--derive-remarks", action="store_true", help="Recompute remarks from CGPA and subject marks"
        )

    def handle(self, *args, **options):
        path, url = options["path"], options["url"]
        if not path and not url:
            raise CommandError("Give a JSONL path or --url.")
        if options["batch_size"] is not None and options["batch_size"] < 1:
            raise CommandError("--batch-size must be positive.")

        if not cache.add(INGEST_LOCK_KEY, True, timeout=settings.RESULTS_INGEST_LOCK_TIMEOUT):
            raise CommandError("Another ingestion is already in progress.")
        try:
            stats = self.run(path, url, options)
        finally:
            cache.delete(INGEST_LOCK_KEY)

        self.stdout.write(self.style.SUCCESS(
            f"✅ Loaded {stats.load.students} students "
            f"({stats.load.theory_rows} theory, {stats.load.practical_rows} practical rows) "
            f"in {stats.load.batches} batches."
        ))
        self.stdout.write(self.style.SUCCESS(
            f"✅ Toppers: {stats.college_toppers} college rows, {stats.branch_toppers} branch rows."
        ))

    def run(self, path, url, options):
        source = url or path
        self.stdout.write(f"Reading {source}")

        stats = IngestStats()
        with open_source(path=path, url=url) as lines:
            records = parse_records(lines, stats, recompute_remarks=options["derive_remarks"])

        self.stdout.write(f"Parsed {stats.records} records from {stats.lines} lines.")
        if stats.skipped:
            self.stdout.write(self.style.WARNING(
                f"⚠️ Skipped {stats.skipped} lines ({stats.parse_errors} malformed, "
                f"{stats.validation_errors} missing required fields)."
            ))
        if not records:
            raise CommandError("No valid records found; the existing results were left untouched.")

        try:
            stats.load = load_records(records, batch_size=options["batch_size"])
        except BatchWriteError as e:
            raise CommandError(f"Load aborted: {e}")

        stats.college_toppers, stats.branch_toppers = rebuild_toppers()
        return stats
