from results.normalizer import SubjectEntry
from results.remarks import derive_remarks


def subject(ese, total):
    return SubjectEntry(subject_code="X", subject_name="", ese=ese, ia=None, total=total, grade=None, credit=0)


def test_low_cgpa_fails_regardless_of_subjects():
    assert derive_remarks(4.9, [subject(60, "80")], []) == "Fail"
    assert derive_remarks(None, [], []) == "Fail"


def test_all_subjects_cleared_is_pass():
    assert derive_remarks(7.0, [subject(25, "35")], [subject(25, "17.5")]) == "PASS"


def test_one_failing_subject_is_paper_back():
    assert derive_remarks(7.0, [subject(24, "60"), subject(40, "70")], [subject(30, "20")]) == "Paper Back"
    assert derive_remarks(7.0, [subject(40, "70")], [subject(30, "17")]) == "Paper Back"


def test_several_failing_subjects_is_fail():
    assert derive_remarks(6.0, [subject(20, "30"), subject(40, "34")], []) == "FAIL"


def test_sentinel_totals_count_as_failing():
    assert derive_remarks(6.0, [subject(30, "NE")], []) == "Paper Back"
    assert derive_remarks(6.0, [subject(None, "40")], []) == "Paper Back"
