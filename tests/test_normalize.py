import pytest

from remotehq.services.normalize import (
    clean_tags,
    detect_level,
    encode_external_id,
    extract_tech_tags,
    format_salary_range,
    normalize_level,
    normalize_location_type,
    strip_html,
    truncate,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("", "Remote"),
        (None, "Remote"),
        ("   ", "Remote"),
        ("Anywhere in the World", "Anywhere"),
        ("Worldwide", "Worldwide"),
        ("world", "Worldwide"),
        ("Global", "Global"),
        ("APAC", "Remote (APAC)"),
        ("Asia Pacific", "Remote (APAC)"),
        ("Remote", "Remote"),
        ("  REMOTE - US ", "Remote"),
    ],
)
def test_normalize_location_type_allowed(raw, expected) -> None:
    assert normalize_location_type(raw) == expected


@pytest.mark.parametrize("raw", ["onsite", "USA", "Berlin, Germany", "Hybrid - London", "Europe"])
def test_normalize_location_type_rejects_unknown(raw) -> None:
    assert normalize_location_type(raw) is None


def test_location_rules_are_ordered() -> None:
    # "anywhere" wins over "remote" when both appear
    assert normalize_location_type("Remote, anywhere") == "Anywhere"
    assert normalize_location_type("Remote (Asia)") == "Remote (APAC)"


@pytest.mark.parametrize(
    "title,expected",
    [
        ("Principal Staff Engineer", "Principal"),
        ("Staff Engineer", "Staff"),
        ("Tech Lead, Payments", "Lead"),
        ("Sr. Backend Developer", "Senior"),
        ("Senior Frontend Engineer", "Senior"),
        ("Jr. Developer", "Junior"),
        ("Mid-Level Python Developer", "Mid"),
        ("Software Engineering Intern", "Intern"),
        ("Director of Engineering", "Director"),
        ("Engineering Manager", "Manager"),
        ("Software Engineer", None),
        ("", None),
    ],
)
def test_detect_level(title, expected) -> None:
    assert detect_level(title) == expected


def test_normalize_level_falls_back_to_title_when_missing() -> None:
    assert normalize_level(None, "Senior Engineer") == "Senior"
    assert normalize_level("", "Staff Engineer") == "Staff"
    assert normalize_level([], "Engineer") is None


def test_normalize_level_from_raw_values() -> None:
    assert normalize_level("Senior", "Engineer") == "Senior"
    assert normalize_level(["Entry level"], "Engineer") == "Junior"
    assert normalize_level({"name": "Executive"}, "Engineer") == "Executive"
    assert normalize_level('["Midweight"]', "Engineer") == "Mid"


def test_normalize_level_any_uses_title() -> None:
    assert normalize_level("Any", "Lead Developer") == "Lead"
    assert normalize_level("any", "Developer") is None


def test_normalize_level_keeps_unrecognized_raw_value() -> None:
    assert normalize_level("Fellow", "Engineer") == "Fellow"
    assert normalize_level(["Fellow"], "Principal Engineer") == "Principal"


def test_extract_tech_tags_table_order_and_dedup() -> None:
    tags = extract_tech_tags("Senior React Engineer", "We use reactjs, Node.js and Postgres")
    assert tags == ["React", "Node.js", "PostgreSQL"]


def test_extract_tech_tags_padded_keys() -> None:
    assert "Go" in extract_tech_tags("Backend Engineer", "write go daily")
    assert "Go" not in extract_tech_tags("Google Engineer", "")
    assert "AI" not in extract_tech_tags("Maintainer", "maintain things")
    assert "ML" in extract_tech_tags("Engineer", "some ml work")


def test_extract_tech_tags_caps_at_six() -> None:
    text = "python django flask javascript typescript rust ruby php"
    tags = extract_tech_tags("Engineer", text)
    assert tags == ["Python", "Django", "Flask", "JavaScript", "TypeScript", "Rust"]


def test_clean_tags_dedup_and_cap() -> None:
    assert clean_tags(["python", "Python", " ", None, "aws"]) == ["python", "aws"]
    assert len(clean_tags([str(i) for i in range(10)])) == 6


def test_encode_external_id_is_stable_and_prefixed() -> None:
    a = encode_external_id("wwr", "https://weworkremotely.com/remote-jobs/acme-senior-engineer")
    b = encode_external_id("wwr", "https://weworkremotely.com/remote-jobs/acme-senior-engineer")
    assert a == b
    assert a.startswith("wwr-")
    assert len(a) == len("wwr-") + 40


def test_strip_html_and_truncate() -> None:
    assert strip_html("<p>Hello <b>world</b></p>") == "Hello world"
    assert strip_html(None) == ""
    assert truncate("x" * 600) == "x" * 500
    assert truncate("") is None


def test_format_salary_range() -> None:
    assert format_salary_range(90000, 120000) == "$90,000 - $120,000"
    assert format_salary_range(None, 120000) is None
    assert format_salary_range("abc", 1) is None
