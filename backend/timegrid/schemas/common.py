import re

HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


def normalize_name(value: str) -> str:
    trimmed = " ".join(value.split())
    if not trimmed:
        raise ValueError("Name cannot be empty")
    return trimmed


def validate_color(value: str) -> str:
    if not HEX_COLOR_PATTERN.match(value):
        raise ValueError("Color must be a hex value like #1a2b3c")
    return value.lower()


def normalize_email(value: str) -> str:
    return value.strip().lower()
