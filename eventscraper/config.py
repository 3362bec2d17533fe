from pydantic_settings import BaseSettings

DEFAULT_ONLINE_MARKERS = ["online", "virtual", "webinar", "web-based", "remote event"]

DEFAULT_LEARNING_MARKERS = [
    "training", "course", "classes", "coaching", "academy", "institute", "institution",
    "school", "e-school", "learning", "certification", "certificate", "bootcamp",
    "batch", "internship", "syllabus", "curriculum", "admission",
    "tuition", "workshop series", "placement", "job guarantee",
    "ielts", "toefl", "spoken english",
]


class Settings(BaseSettings):
    ENV: str = "development"
    DATABASE_URL: str = "sqlite:///./eventscraper.db"

    SCRAPER_INTERVAL_MINUTES: int = 10
    SCRAPER_TIMEOUT_SECONDS: int = 120
    MAX_RETRIES: int = 3
    RATE_LIMIT_DELAY_SECONDS: int = 2
    ADAPTER_TIMEOUT_SECONDS: int = 300

    DETAIL_STALENESS_DAYS: int = 7
    DETAIL_RUN_TIMEOUT_MINUTES: int = 60
    DETAIL_INTERVAL_MINUTES: int = 30
    DETAIL_FETCH_TIMEOUT_SECONDS: int = 30
    DETAIL_MIN_DELAY_SECONDS: int = 3
    DETAIL_MAX_DELAY_SECONDS: int = 7

    # JSON lists when overridden from the environment
    ONLINE_MARKERS: list[str] = DEFAULT_ONLINE_MARKERS
    LEARNING_MARKERS: list[str] = DEFAULT_LEARNING_MARKERS


settings = Settings()
