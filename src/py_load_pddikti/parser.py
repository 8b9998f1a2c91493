# Copyright 2025 Gowtham Rao <rao@ohdsi.org>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Contains functions for scraping student data out of rendered registry pages.

The registry is a single-page app whose markup is not under our control, so
everything here is best-effort: each strategy returns an empty list (or None)
when the page does not look the way it expects, and never raises.
"""

import logging
import re

from .models import StudentRecord

logger = logging.getLogger(__name__)

TAG_RE = re.compile(r"<[^>]*>")
ROW_RE = re.compile(r"<tr[^>]*>(.*?)</tr>", re.IGNORECASE | re.DOTALL)
CELL_RE = re.compile(r"<t[dh][^>]*>(.*?)</t[dh]>", re.IGNORECASE | re.DOTALL)
TABLE_START_RE = re.compile(r"<table", re.IGNORECASE)
TABLE_END_RE = re.compile(r"</table>", re.IGNORECASE)
TOKEN_RE = re.compile(r"/detail-pt/([A-Za-z0-9_-]+={0,2})")

ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&nbsp;", " "),
)

# Most specific first; the first keyword found anywhere in the page wins.
HEADING_KEYWORDS = (
    ">mahasiswa<",
    "mahasiswa",
    "data mahasiswa",
    "hasil mahasiswa",
)

# Label keyword -> StudentRecord field, checked in this order on each line.
LABEL_FIELDS = (
    ("nama", "name"),
    ("nim", "identifier"),
    ("perguruan", "institution"),
    ("program", "program"),
)


def clean_html(fragment: str) -> str:
    """Strip tags and decode the common named entities from a markup fragment.

    Entities are decoded until the text stops changing, so that cleaning an
    already-clean string is a no-op.
    """
    cleaned = fragment
    while True:
        previous = cleaned
        cleaned = TAG_RE.sub("", cleaned)
        for entity, char in ENTITIES:
            cleaned = cleaned.replace(entity, char)
        cleaned = cleaned.strip()
        if cleaned == previous:
            return cleaned


def extract_from_table(table_html: str) -> list[StudentRecord]:
    """Parses the rows of a results table into student records.

    The first row is treated as the header and skipped. Rows with fewer than
    three cells are ignored, as are rows where both the name and the student
    number are empty.
    """
    results = []
    rows = ROW_RE.findall(table_html)

    for row in rows[1:]:
        cells = CELL_RE.findall(row)
        if len(cells) < 3:
            continue

        record = StudentRecord(
            name=clean_html(cells[0]),
            identifier=clean_html(cells[1]),
            institution=clean_html(cells[2]),
            program=clean_html(cells[3]) if len(cells) >= 4 else "",
        )
        if record.name or record.identifier:
            results.append(record)

    return results


def _extract_value(line: str) -> str:
    """Returns the text after the first colon, or the whole line."""
    _, sep, value = line.partition(":")
    if sep and value:
        return value.strip()
    return line


def extract_from_text(html: str) -> list[StudentRecord]:
    """Scans label/value lines ("Nama: ...", "NIM: ...") for student records.

    Used when the results section is rendered as cards instead of a table.
    A record is emitted as soon as it has a name plus either a student
    number or an institution.
    """
    results = []
    current: dict[str, str] = {}

    def is_complete() -> bool:
        return bool(current.get("name")) and bool(
            current.get("identifier") or current.get("institution"),
        )

    for raw_line in html.split("\n"):
        line = clean_html(raw_line)
        if not line:
            continue

        lower = line.lower()
        for keyword, field in LABEL_FIELDS:
            if keyword in lower and not current.get(field):
                current[field] = _extract_value(line)
                break

        if is_complete():
            results.append(StudentRecord(**current))
            current = {}

    # Flush whatever is left once a name has been seen.
    if current.get("name"):
        results.append(StudentRecord(**current))

    return results


def _find_heading(html: str) -> int:
    for keyword in HEADING_KEYWORDS:
        match = re.search(re.escape(keyword), html, re.IGNORECASE)
        if match:
            return match.start()
    return -1


def extract_student_records(html: str) -> list[StudentRecord]:
    """Locates the student section of a search page and extracts its records.

    Args:
        html: The full rendered page.

    Returns:
        The records found after the student heading; an empty list when the
        heading is missing or the results table is truncated.
    """
    heading_idx = _find_heading(html)
    if heading_idx == -1:
        logger.info("No mahasiswa heading found")
        return []

    search_area = html[heading_idx:]

    start = TABLE_START_RE.search(search_area)
    if start is None:
        logger.info("No table found after mahasiswa heading, scanning text")
        return extract_from_text(search_area)

    end = TABLE_END_RE.search(search_area, start.start())
    if end is None:
        logger.warning("No closing table tag found")
        return []

    table_html = search_area[start.start():end.end()]
    logger.debug("Found table HTML length: %d", len(table_html))
    return extract_from_table(table_html)


def extract_institution_token(html: str) -> str | None:
    """Returns the opaque token from the first ``/detail-pt/<token>`` link."""
    match = TOKEN_RE.search(html)
    if match is None:
        return None
    return match.group(1)
