import re
from typing import Union


def commafy(num: Union[int, float, str]) -> str:
    """Group thousands with commas once the integer part has five or more digits."""
    if isinstance(num, str):
        num = int(float(num))
    parts = str(num).split(".")
    if len(parts[0].lstrip("-")) >= 5:
        parts[0] = re.sub(r"(\d)(?=(\d{3})+$)", r"\1,", parts[0])
    if len(parts) > 1 and len(parts[1]) >= 5:
        parts[1] = re.sub(r"(\d{3})", r"\1 ", parts[1])
    return ".".join(parts)


def first_sentence(text: str) -> str:
    idx = text.find(".")
    if idx != -1:
        return text[: idx + 1]
    return text
