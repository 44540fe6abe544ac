"""
text.py
-------
Text helpers for values that end up in the UTF-8 output document.
"""


def replace_surrogates(text: str) -> str:
    """Replace unpaired UTF-16 surrogates with U+FFFD; paired ones become the real code point."""
    try:
        text.encode("utf-8")
        return text
    except UnicodeEncodeError:
        return text.encode("utf-16", "surrogatepass").decode("utf-16", "replace")


def scrub_json(value):
    if isinstance(value, str):
        return replace_surrogates(value)
    if isinstance(value, list):
        return [scrub_json(v) for v in value]
    if isinstance(value, dict):
        return {replace_surrogates(k): scrub_json(v) for k, v in value.items()}
    return value
