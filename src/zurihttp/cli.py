"""
cli.py
------
Process entrypoint. Reads the whole input document from stdin, runs one invocation
and writes exactly one JSON document to stdout. The exit status is always 0;
failures are reported in the "error" field. Logs go to stderr.
"""
import json
import logging
import sys

from .adapter import execute
from .config import settings
from .utils.text import replace_surrogates


def configure_logging():
    level = getattr(logging, settings.LOG_LEVEL.upper(), None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def read_input(stream=None) -> bytes:
    stream = stream or sys.stdin
    buffer = getattr(stream, "buffer", None)
    if buffer is not None:
        return buffer.read()
    return stream.read().encode("utf-8")


def write_output(output: dict, stream=None):
    stream = stream or sys.stdout
    data = replace_surrogates(json.dumps(output, ensure_ascii=False, separators=(",", ":"))) + "\n"
    buffer = getattr(stream, "buffer", None)
    if buffer is not None:
        stream.flush()
        buffer.write(data.encode("utf-8"))
        buffer.flush()
    else:
        stream.write(data)
        stream.flush()


def main() -> int:
    configure_logging()
    try:
        raw = read_input()
    except OSError as e:
        output = {"error": f"failed to decode input: {e}"}
    else:
        output = execute(raw)
    write_output(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
