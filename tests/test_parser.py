"""Tests for the parser module."""

import pytest

from py_load_pddikti.models import StudentRecord
from py_load_pddikti.parser import (
    clean_html,
    extract_from_table,
    extract_from_text,
    extract_institution_token,
    extract_student_records,
)


@pytest.mark.parametrize(
    "fragment, expected",
    [
        ("  plain text  ", "plain text"),
        ("<b>Jane</b> <i>Doe</i>", "Jane Doe"),
        ("Tom &amp; Jerry", "Tom & Jerry"),
        ("&lt;tag&gt;", ""),
        ("&quot;quoted&quot; &#39;single&#39;", "\"quoted\" 'single'"),
        ("Jane&nbsp;Doe", "Jane Doe"),
        ('<a href="/x"><span>Nested</span></a>', "Nested"),
        ("unterminated <b", "unterminated <b"),
        ("", ""),
    ],
)
def test_clean_html(fragment, expected):
    assert clean_html(fragment) == expected


@pytest.mark.parametrize(
    "fragment",
    [
        "&amp;lt;b&amp;gt;bold",
        "  <p>Tom &amp;amp; Jerry</p> ",
        "&amp;nbsp; padded &amp;nbsp;",
        "a < b > c",
        "<<>>",
    ],
)
def test_clean_html_is_idempotent(fragment):
    once = clean_html(fragment)
    assert clean_html(once) == once


def test_extract_from_table_maps_cells_positionally():
    table = """
    <table>
      <tr><th>Nama</th><th>NIM</th><th>PT</th><th>Prodi</th></tr>
      <tr><td>Jane Doe</td><td>12345</td><td>Example University</td><td>Informatika</td></tr>
      <tr class="odd"><td>John Roe</td><td>67890</td><td>Other College</td></tr>
    </table>
    """
    assert extract_from_table(table) == [
        StudentRecord(
            name="Jane Doe",
            identifier="12345",
            institution="Example University",
            program="Informatika",
        ),
        StudentRecord(
            name="John Roe", identifier="67890", institution="Other College", program="",
        ),
    ]


def test_extract_from_table_skips_header_even_with_data_cells():
    table = """
    <TABLE>
      <TR><TD>Looks Like</TD><TD>A Record</TD><TD>But Is Header</TD></TR>
      <TR><TD>Jane Doe</TD><TD>12345</TD><TD>Example University</TD></TR>
    </TABLE>
    """
    records = extract_from_table(table)
    assert [r.name for r in records] == ["Jane Doe"]


def test_extract_from_table_handles_nested_markup_across_lines():
    table = """<table><tr><th>h</th></tr>
    <tr>
      <td class="name"><a href="/detail-mhs/xyz"><span>Jane
      Doe</span></a></td>
      <td>12345</td>
      <td><div>Example &amp; Co University</div></td>
    </tr></table>"""
    records = extract_from_table(table)
    assert len(records) == 1
    assert records[0].name == "Jane\n      Doe"
    assert records[0].institution == "Example & Co University"


def test_extract_from_table_drops_short_and_empty_rows():
    table = """
    <table>
      <tr><th>Nama</th><th>NIM</th><th>PT</th></tr>
      <tr><td>Only</td><td>Two</td></tr>
      <tr><td> </td><td>&nbsp;</td><td>Example University</td></tr>
      <tr><td></td><td>555</td><td>Example University</td></tr>
    </table>
    """
    records = extract_from_table(table)
    assert len(records) == 1
    assert records[0].identifier == "555"
    assert records[0].name == ""


def test_extract_from_table_header_only():
    assert extract_from_table("<table><tr><th>Nama</th></tr></table>") == []


def test_extract_from_text_closes_record_on_name_and_number():
    text = "\n".join(
        [
            "<div>Nama: Jane Doe</div>",
            "<div>NIM: 12345</div>",
            "<div>Nama: John Roe</div>",
            "<div>Perguruan Tinggi: Example University</div>",
            "<div>Program Studi: Informatika</div>",
        ],
    )
    assert extract_from_text(text) == [
        StudentRecord(name="Jane Doe", identifier="12345"),
        StudentRecord(name="John Roe", institution="Example University"),
    ]


def test_extract_from_text_flushes_trailing_named_record():
    text = "<p>Nama: Jane Doe</p>\n<p>Program Studi: Informatika</p>"
    assert extract_from_text(text) == [
        StudentRecord(name="Jane Doe", program="Informatika"),
    ]


def test_extract_from_text_keeps_first_value_per_field():
    text = "Nama: Jane Doe\nNama: Someone Else\nNIM: 12345"
    records = extract_from_text(text)
    assert records == [StudentRecord(name="Jane Doe", identifier="12345")]


def test_extract_from_text_line_without_colon_is_its_value():
    records = extract_from_text("Nama Jane Doe\nNIM 12345")
    assert records == [StudentRecord(name="Nama Jane Doe", identifier="NIM 12345")]


def test_extract_from_text_ignores_unnamed_fragments():
    assert extract_from_text("NIM: 12345\nPerguruan: Example University") == []


def test_extract_student_records_from_table():
    page = """
    <div><h2>Mahasiswa</h2>
    <table><tr><th>Nama</th><th>NIM</th><th>PT</th></tr>
    <tr><td>Jane Doe</td><td>12345</td><td>Example University</td></tr></table>
    </div>
    <table><tr><th>x</th></tr><tr><td>Not</td><td>A</td><td>Student</td></tr></table>
    """
    records = extract_student_records(page)
    assert [r.name for r in records] == ["Jane Doe"]


def test_extract_student_records_without_heading_ignores_tables():
    page = """
    <h2>Dosen</h2>
    <table><tr><th>Nama</th></tr><tr><td>Jane</td><td>1</td><td>Uni</td></tr></table>
    """
    assert extract_student_records(page) == []


def test_extract_student_records_falls_back_to_text():
    page = (
        "<section>\n<h3>Hasil Mahasiswa</h3>\n"
        "<div>Nama: Jane Doe</div>\n"
        "<div>Perguruan Tinggi: Example University</div>\n"
        "</section>"
    )
    assert extract_student_records(page) == [
        StudentRecord(name="Jane Doe", institution="Example University"),
    ]


def test_extract_student_records_truncated_table():
    page = "<h2>Mahasiswa</h2><table><tr><th>Nama</th></tr><tr><td>Jane</td><td>1</td><td>U</td></tr>"
    assert extract_student_records(page) == []


def test_extract_student_records_prefers_tag_wrapped_heading():
    # The bare keyword appears earlier in a script, but the tag-wrapped
    # heading is more specific and wins.
    page = """
    <script>var route = "/mahasiswa/list"; var t = "<table><tr><td>x</td></tr></table>";</script>
    <h2>Mahasiswa</h2>
    <table><tr><th>Nama</th><th>NIM</th><th>PT</th></tr>
    <tr><td>Jane Doe</td><td>12345</td><td>Example University</td></tr></table>
    """
    records = extract_student_records(page)
    assert [r.identifier for r in records] == ["12345"]


def test_extract_institution_token():
    page = '<a href="/detail-pt/abc123==">A</a> <a href="/detail-pt/other">B</a>'
    assert extract_institution_token(page) == "abc123=="


@pytest.mark.parametrize(
    "page",
    [
        "",
        "<a href='/detail-mhs/abc123'>student</a>",
        "/detail-pt/",
        "detail-pt abc123",
    ],
)
def test_extract_institution_token_absent(page):
    assert extract_institution_token(page) is None


def test_extract_institution_token_url_safe_characters():
    assert extract_institution_token('href="/detail-pt/a-B_9="') == "a-B_9="
