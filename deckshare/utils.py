"""Utility functions for deckshare."""

import hashlib
import json
import re
import unicodedata
from collections import Counter

import markdown

from .config import LOGGER
from .errors import CardListInputError

DECKLIST_NAME_MAX_LENGTH = 60
UNTITLED = "Untitled"

_LABEL = r"[a-z\d\u00a1-\uffff](?:[a-z\d\u00a1-\uffff-]*[a-z\d\u00a1-\uffff])?"

# Bare http(s)/ftp URLs; a URL right after "(" is already the target of a
# markdown link. Group 1 is the host, used as the link text.
URL_PATTERN = re.compile(
    r"(?<!\()\b(?:https?|ftp)://"
    rf"({_LABEL}(?:\.{_LABEL})*\.[a-z\u00a1-\uffff]{{2,6}})"
    r"(?::\d+)?"
    r"[^\s]*",
    re.IGNORECASE,
)
MENTION_PATTERN = re.compile(r"`@(\w+)`")
DECKLIST_URL_PATTERN = re.compile(r"view/(\d+)")


def read_cardlist_from_file(path: str) -> list[str]:
    """Read a cardlist from a file."""
    with open(path) as f:
        return f.readlines()


def parse_cardlist(card_list: list[str]) -> dict[str, int]:
    """
    Parses and validates a card list in "<quantity> <card code>" format.
    "3x 01001" is accepted as well.

    Returns: Dictionary that maps CardCode -> Count
    """
    line_errors: list[str] = []
    cards: Counter[str] = Counter()
    for line in card_list:
        if line.startswith("#") or line.strip() == "" or not line[0].isdigit():
            # skip non-cardlines
            continue

        split = line.strip().split(None, 1)

        if len(split) != 2:
            line_errors.append(line)
            continue

        quantity_str = split[0].rstrip("xX")
        if not quantity_str.isdigit():
            line_errors.append(line)
            continue

        quantity, card_code = int(quantity_str), split[1].strip()

        cards[card_code] += quantity

    if len(line_errors) > 0:
        raise CardListInputError(line_errors)
    else:
        return dict(cards)


def slugify(value: str) -> str:
    """Lowercase ASCII, words joined by single dashes."""
    text = unicodedata.normalize("NFKD", value or "")
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower()
    text = text.replace("&", " and ")
    text = text.replace("'", "")
    text = re.sub(r"[^a-z0-9]+", "-", text)
    text = re.sub(r"-{2,}", "-", text)
    return text.strip("-")


def canonical_name(name: str, version: int) -> str:
    return f"{slugify(name)}-{version}"


def normalize_decklist_name(name: str | None) -> str:
    name = (name or "").strip()[:DECKLIST_NAME_MAX_LENGTH].strip()
    return name or UNTITLED


def render_markdown(source: str | None) -> str:
    """Render user markdown to HTML. Raw HTML in the source is escaped."""
    md = markdown.Markdown(extensions=["fenced_code", "sane_lists"])
    md.preprocessors.deregister("html_block")
    md.inlinePatterns.deregister("html")
    return md.convert(source or "")


def autolink_urls(text: str) -> str:
    """Turn bare URLs into markdown links labelled with their host."""
    return URL_PATTERN.sub(lambda m: f"[{m.group(1)}]({m.group(0)})", text)


def extract_mentions(text: str) -> list[str]:
    """Usernames mentioned as `@username`, deduplicated in order of appearance."""
    return list(dict.fromkeys(MENTION_PATTERN.findall(text)))


def parse_precedent_ref(value: object) -> int | None:
    """
    Resolve a precedent given either as a bare decklist id or as a decklist
    detail URL (".../decklist/view/<id>/<name>").
    Anything else resolves to None.
    """
    ref = str(value or "").strip()
    if not ref:
        return None

    if re.fullmatch(r"\d+", ref):
        decklist_id = int(ref)
    else:
        match = DECKLIST_URL_PATTERN.search(ref)
        if not match:
            LOGGER.warning(f"Ignoring unparseable precedent reference: {ref!r}")
            return None
        decklist_id = int(match.group(1))

    return decklist_id or None


def parse_int_ref(value: object) -> int | None:
    """
    Lenient id parsing: strip everything but digits and signs, like a
    form sanitizer would. Non-positive or empty values resolve to None.
    """
    if value is None:
        return None
    digits = re.sub(r"[^\d+-]", "", str(value))
    try:
        number = int(digits)
    except ValueError:
        return None
    return number if number > 0 else None


def compute_signature(content: dict[str, int]) -> str:
    """md5 of the canonical JSON encoding of a card code -> quantity mapping."""
    encoded = json.dumps(content, sort_keys=True, separators=(",", ":"))
    return hashlib.md5(encoded.encode("utf-8")).hexdigest()
