# auction_ingest/normalize.py
"""Turn government address strings into something the geocoder can match.

Source addresses carry annotations the geocoder chokes on: `(건물)`, `[일좌권1매]`,
floor and building numbers, "외 2필지" parcel counts, custody notes such as
"금천세무서 보관중인 ..." and comma-separated parcel lists. Every step below only
removes text, so the result is stable under a second pass.
"""
import re

_PARENTHESIZED = re.compile(r"\([^)]*\)")
_BRACKETED = re.compile(r"\[[^\]]*\]")
# floor, building, parcel-count and lot-count markers
_DETAIL_CLAUSE = re.compile(r" 제\d+층.*| 제\d+동.*| 외\s*\d*필지.*| 총\s*\d*좌.*", re.DOTALL)
# "in storage of", share certificates, "kept inside"
_CUSTODY_CLAUSE = re.compile(r"\s보관중인.*| 출자증권.*| 내\s*보관.*", re.DOTALL)


def normalize_address(raw):
    if raw is None or not raw.strip():
        return ""

    cleaned = raw.strip()
    cleaned = _PARENTHESIZED.sub("", cleaned).strip()
    cleaned = _BRACKETED.sub("", cleaned).strip()
    cleaned = _DETAIL_CLAUSE.sub("", cleaned).strip()
    cleaned = _CUSTODY_CLAUSE.sub("", cleaned).strip()

    # multi-parcel lists: "589-1 , 589-2, 589-3" keeps the first parcel
    comma = cleaned.find(",")
    if comma != -1:
        cleaned = cleaned[:comma]

    return cleaned.strip()
