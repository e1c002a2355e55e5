import json
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from results.exceptions import IngestError
from results.normalizer import normalize_record
from results.ranking import compute_ranks


class Command(BaseCommand):
    help = "Write a copy of a JSONL results file with college and university ranks filled in"

    def add_arguments(self, parser):
        parser.add_argument("path", help="Input JSONL file")
        parser.add_argument("--output", type=str, help="Output file (default: <input>_ranked.jsonl)")

    def handle(self, *args, **options):
        source = Path(options["path"])
        target = Path(options["output"]) if options["output"] else source.with_name(f"{source.stem}_ranked.jsonl")
        if not source.exists():
            raise CommandError(f"{source} does not exist.")

        raw_records, records = [], []
        skipped = 0
        with source.open("r", encoding="utf-8", errors="replace") as f:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    raw = json.loads(line)
                    records.append(normalize_record(raw, settings.RESULTS_COURSE_CODE_POSITIONS))
                except (ValueError, IngestError) as e:
                    skipped += 1
                    self.stdout.write(self.style.WARNING(f"⚠️ Line {line_no} skipped: {e}"))
                    continue
                raw_records.append(raw)

        self.stdout.write(f"Loaded {len(records)} records. Ranking...")
        ranks = compute_ranks(records)

        with target.open("w", encoding="utf-8") as f:
            for raw, record in zip(raw_records, records):
                pair = ranks[record.registration_no]
                if not isinstance(raw.get("performance"), dict):
                    raw["performance"] = {}
                performance = raw["performance"]
                performance["college_rank_branchwise"] = pair.college_rank
                performance["university_rank_branchwise"] = pair.university_rank
                f.write(json.dumps(raw, ensure_ascii=False) + "\n")

        if skipped:
            self.stdout.write(self.style.WARNING(f"⚠️ {skipped} lines could not be ranked."))
        self.stdout.write(self.style.SUCCESS(f"✅ Ranked file saved to {target}"))
