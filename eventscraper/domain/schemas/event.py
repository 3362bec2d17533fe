from pydantic import BaseModel


class EventCandidate(BaseModel):
    """Raw event produced by one source adapter, not yet validated."""

    name: str = ""
    location: str = ""
    date_time: str = ""
    date: str = ""
    time: str = ""
    website: str = ""
    description: str = ""
    address: str = ""
    event_type: str = ""
    platform: str = ""


class ScrapedDetail(BaseModel):
    event_id: int
    full_description: str = ""
    organizer: str = ""
    organizer_contact: str = ""
    image_url: str = ""
    tags: str = ""
    price: str = ""
    registration_url: str = ""
    external_url: str = ""
    duration: str = ""
    agenda_html: str = ""
    speakers_json: str = ""
    prerequisites: str = ""
    max_attendees: int = 0
    attendees_count: int = 0
    scraped_body: str = ""
