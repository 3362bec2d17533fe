from eventscraper.services.details.parsers import (
    PLATFORM_PARSERS,
    parse_detail,
    parse_generic,
    parser_for,
)
from eventscraper.services.details.sanitize import sanitize_html, truncate
from eventscraper.services.details.types import RefreshCandidate

LONG = "A full day of talks on distributed systems, databases and the craft of operating them. " * 2


def _event(platform: str, website: str = "https://example.org/e/1") -> RefreshCandidate:
    return RefreshCandidate(id=1, name="Event", website=website, platform=platform)


def test_parser_for_known_platforms_and_fallback() -> None:
    assert set(PLATFORM_PARSERS) == {"allevents", "hasgeek", "meetup", "townscript", "biec", "hitex", "echai"}
    assert parser_for("HasGeek") is PLATFORM_PARSERS["hasgeek"]
    assert parser_for("unknown-site") is parse_generic
    assert parser_for(None) is parse_generic


def test_generic_parser_reads_first_long_block_and_og_image() -> None:
    html = f"""
    <html><head><meta property="og:image" content="https://img.example.org/a.png"></head>
    <body><div class="description">short</div><article><p>{LONG}</p></article>
    <span class="organizer"> PyData  Pune </span></body></html>
    """
    detail = parse_detail(html, _event("whatever"))

    assert LONG.strip() in detail.full_description
    assert detail.image_url == "https://img.example.org/a.png"
    assert detail.organizer == "PyData Pune"
    assert detail.registration_url == "https://example.org/e/1"
    assert detail.event_id == 1


def test_meetup_parser_extracts_price_and_contact() -> None:
    html = f"""
    <div class="w-full break-words"><p>{LONG}</p>
    <p>Charges: Rs. 250 per head. Contact us: 9876543210</p></div>
    """
    detail = parse_detail(html, _event("meetup"))

    assert detail.price == "₹250"
    assert detail.organizer_contact == "9876543210"


def test_allevents_parser_collects_tags_and_register_link() -> None:
    html = f"""
    <div class="event-description">{LONG}</div>
    <a class="register-button" href="/tickets/1">Register</a>
    <div class="event-tags"><a>Tech</a><a>AI</a></div>
    """
    detail = parse_detail(html, _event("allevents"))

    assert detail.registration_url == "https://example.org/tickets/1"
    assert detail.tags == "Tech, AI"


def test_biec_parser_defaults_organizer() -> None:
    html = "<section><h2 class='eve-detail'>Details</h2><p>Machine tools expo for the south.</p></section>"
    detail = parse_detail(html, _event("biec"))

    assert "<h3>Event Details</h3>" in detail.full_description
    assert detail.organizer.startswith("BIEC")


def test_hitex_parser_follows_external_website_button() -> None:
    html = """
    <a class="btn" href="/tickets">Tickets</a>
    <a class="btn" href="https://expo.example.com">Visit Website</a>
    """
    external_html = f"<html><body><section class='section'><p>{LONG}</p></section></body></html>"
    fetched: list[str] = []

    def fetch_external(url: str) -> str:
        fetched.append(url)
        return external_html

    detail = parse_detail(html, _event("hitex"), fetch_external=fetch_external)

    assert fetched == ["https://expo.example.com"]
    assert detail.external_url == "https://expo.example.com"
    assert LONG.strip() in detail.full_description


def test_hitex_parser_keeps_detail_when_external_fetch_fails() -> None:
    html = '<a class="btn" href="https://expo.example.com">Website</a>'
    detail = parse_detail(html, _event("hitex"), fetch_external=lambda url: None)

    assert detail.external_url == "https://expo.example.com"
    assert detail.full_description == ""
    assert detail.organizer.startswith("HITEX")


def test_sanitize_html_strips_scripts_and_handlers() -> None:
    html = (
        '<p onclick="steal()">Hi</p><script>alert(1)</script>'
        '<style>p{}</style><a href="javascript:void(0)">x</a>'
    )
    cleaned = sanitize_html(html)

    assert cleaned == '<p>Hi</p><a href="#">x</a>'


def test_truncate_caps_length() -> None:
    assert truncate("abc", limit=2) == "ab"
    assert truncate("abc") == "abc"
