import json
from io import StringIO

import pytest
import requests
from django.core.cache import cache
from django.core.management import CommandError, call_command

from results.models import BranchTopper, CollegeTopper, Student, TheorySubject
from results.pipeline import INGEST_LOCK_KEY

pytestmark = pytest.mark.django_db


@pytest.fixture(autouse=True)
def clear_lock(db):
    cache.delete(INGEST_LOCK_KEY)
    yield
    cache.delete(INGEST_LOCK_KEY)


def run_load(*args, **options):
    out = StringIO()
    call_command("load_results", *args, stdout=out, **options)
    return out.getvalue()


def test_load_results_end_to_end(jsonl_file, raw_record):
    path = jsonl_file([
        raw_record(registration_no="24101103001", cgpa=9.2),
        "{not json",
        raw_record(registration_no="24101103002", cgpa=9.2),
        "",
    ])

    output = run_load(str(path))

    ranks = list(Student.objects.order_by("registration_no").values_list("registration_no", "college_branch_rank"))
    assert ranks == [("24101103001", 1), ("24101103002", 2)]
    assert CollegeTopper.objects.count() == 2
    assert BranchTopper.objects.count() == 2
    assert "Skipped 1 lines" in output
    assert "Loaded 2 students" in output
    assert cache.get(INGEST_LOCK_KEY) is None


def test_loading_the_same_file_twice_gives_the_same_store(jsonl_file, raw_record):
    path = jsonl_file([raw_record(registration_no=f"2410110300{i}", cgpa=6 + i / 2) for i in range(6)])

    def snapshot():
        return (
            list(Student.objects.order_by("registration_no").values(
                "registration_no", "name", "college_id", "course_id", "cgpa", "remarks",
                "college_branch_rank", "overall_branch_rank")),
            list(TheorySubject.objects.order_by("student_id", "subject_code").values_list(
                "student_id", "subject_code", "total")),
            list(CollegeTopper.objects.order_by("rank_in_college_branch").values_list(
                "registration_no", "rank_in_college_branch")),
        )

    run_load(str(path), batch_size=4)
    first = snapshot()
    run_load(str(path), batch_size=4)

    assert snapshot() == first


def test_reload_drops_students_missing_from_the_new_file(jsonl_file, raw_record):
    run_load(str(jsonl_file([raw_record(registration_no="24101103001"), raw_record(registration_no="24101103002")])))
    run_load(str(jsonl_file([raw_record(registration_no="24101103002")], name="second.jsonl")))

    assert list(Student.objects.values_list("registration_no", flat=True)) == ["24101103002"]
    assert Student.objects.get().college_branch_rank == 1


def test_derive_remarks_overrides_source_remarks(jsonl_file, raw_record):
    clean = raw_record(registration_no="24101103001", performance={"remarks": "WITHHELD"})
    absent = raw_record(registration_no="24101103002")
    absent["subjects"]["theory"][0]["total"] = "NE"
    path = jsonl_file([clean, absent])

    run_load(str(path), derive_remarks=True)

    remarks = dict(Student.objects.values_list("registration_no", "remarks"))
    assert remarks == {"24101103001": "PASS", "24101103002": "Paper Back"}


def test_missing_remarks_derived_when_enabled(jsonl_file, raw_record, settings):
    settings.RESULTS_DERIVE_MISSING_REMARKS = True
    raw = raw_record(cgpa=4.0)
    del raw["performance"]["remarks"]

    run_load(str(jsonl_file([raw])))

    assert Student.objects.get().remarks == "Fail"


def test_held_lock_refuses_to_start(jsonl_file, raw_record):
    cache.add(INGEST_LOCK_KEY, True)

    with pytest.raises(CommandError, match="already in progress"):
        run_load(str(jsonl_file([raw_record()])))
    assert not Student.objects.exists()


def test_ingest_lock_lives_in_the_shared_database_cache():
    from django.conf import settings
    from django.core.cache import caches
    from django.core.cache.backends.db import DatabaseCache
    from django.db import connection

    assert isinstance(caches["default"], DatabaseCache)

    assert cache.add(INGEST_LOCK_KEY, True)
    table = connection.ops.quote_name(settings.CACHES["default"]["LOCATION"])
    with connection.cursor() as cursor:
        cursor.execute(f"SELECT COUNT(*) FROM {table} WHERE cache_key = %s", [cache.make_key(INGEST_LOCK_KEY)])
        assert cursor.fetchone()[0] == 1
    # A second writer sees the row and backs off.
    assert not cache.add(INGEST_LOCK_KEY, True)


def test_invalid_utf8_line_is_skipped(tmp_path, raw_record):
    path = tmp_path / "mixed.jsonl"
    path.write_bytes(
        json.dumps(raw_record(registration_no="24101103001")).encode("utf-8") + b"\n"
        + b'{"student": "\xff\xfe"}\n'
        + json.dumps(raw_record(registration_no="24101103002")).encode("utf-8") + b"\n"
    )

    output = run_load(str(path))

    assert Student.objects.count() == 2
    assert "Skipped 1 lines" in output


def test_source_is_required():
    with pytest.raises(CommandError):
        run_load()


def test_missing_file_is_a_command_error(tmp_path):
    with pytest.raises(CommandError, match="Cannot open"):
        run_load(str(tmp_path / "nope.jsonl"))
    assert cache.get(INGEST_LOCK_KEY) is None


def test_file_without_valid_records_leaves_store_untouched(jsonl_file, raw_record):
    run_load(str(jsonl_file([raw_record()])))

    broken = jsonl_file(["{oops", json.dumps({"student": {"name": "NO REG"}})], name="broken.jsonl")
    with pytest.raises(CommandError, match="No valid records"):
        run_load(str(broken))

    assert Student.objects.count() == 1
    assert CollegeTopper.objects.count() == 1


class FakeResponse:
    def __init__(self, lines, status=200):
        self.lines = lines
        self.status = status
        self.closed = False

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def iter_lines(self, decode_unicode=False):
        return iter(self.lines)

    def close(self):
        self.closed = True


def test_load_from_url(monkeypatch, raw_record):
    response = FakeResponse([json.dumps(raw_record(registration_no="24101103009"))])
    calls = []

    def fake_get(url, **kwargs):
        calls.append((url, kwargs))
        return response

    monkeypatch.setattr(requests, "get", fake_get)

    run_load(url="https://results.example.org/beu.jsonl")

    assert calls[0][0] == "https://results.example.org/beu.jsonl"
    assert calls[0][1]["timeout"] == 30
    assert response.closed
    assert Student.objects.get().registration_no == "24101103009"


def test_url_http_error_is_a_command_error(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda url, **kwargs: FakeResponse([], status=503))

    with pytest.raises(CommandError, match="Failed to fetch"):
        run_load(url="https://results.example.org/beu.jsonl")


def test_rank_results_writes_ranked_copy(jsonl_file, raw_record, tmp_path):
    path = jsonl_file([
        raw_record(registration_no="24101103001", cgpa=7.0),
        "garbage",
        raw_record(registration_no="24101103002", cgpa=9.0),
        raw_record(registration_no="24101110001", college_code="110", cgpa=8.0),
    ], name="beu.jsonl")
    out = StringIO()

    call_command("rank_results", str(path), stdout=out)

    ranked = [json.loads(line) for line in (tmp_path / "beu_ranked.jsonl").read_text(encoding="utf-8").splitlines()]
    assert [
        (r["student"]["registration_no"],
         r["performance"]["college_rank_branchwise"],
         r["performance"]["university_rank_branchwise"])
        for r in ranked
    ] == [("24101103001", 2, 3), ("24101103002", 1, 1), ("24101110001", 1, 2)]
    assert ranked[0]["student"]["name"] == "ASHA KUMARI"
    assert "Line 2 skipped" in out.getvalue()
    assert not Student.objects.exists()


def test_rank_results_custom_output(jsonl_file, raw_record, tmp_path):
    path = jsonl_file([raw_record()])
    target = tmp_path / "out" / "ranked.jsonl"
    target.parent.mkdir()

    call_command("rank_results", str(path), output=str(target), stdout=StringIO())

    assert json.loads(target.read_text(encoding="utf-8"))["performance"]["college_rank_branchwise"] == 1


def test_rank_results_missing_input(tmp_path):
    with pytest.raises(CommandError):
        call_command("rank_results", str(tmp_path / "missing.jsonl"))
