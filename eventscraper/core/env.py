import os

from dotenv import load_dotenv


def load_env() -> None:
    load_dotenv()


def is_env_flag_enabled(name: str, default: str = "") -> bool:
    value = os.getenv(name, default)
    return value.strip().lower() in {"true", "1", "yes"}
