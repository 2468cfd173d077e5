"""
Passphrase entry through a pinentry helper.

pinentry speaks the Assuan protocol: one command per line on stdin, one
response per line on stdout. Data responses start with ``D `` and
percent-escape ``%``, CR, LF and other control bytes. See
https://www.gnupg.org/documentation/manuals/assuan/Server-responses.html
"""

import logging
import string
import subprocess
from typing import Optional

logger = logging.getLogger('gitremote.credentials.pinentry')

_HEX_DIGITS = frozenset(string.hexdigits.encode("ascii"))


def decode_assuan_data(encoded: str) -> Optional[str]:
    """
    Decode the payload of an Assuan ``D`` line.

    Each ``%`` must be followed by exactly two hex digits giving one raw
    byte. All other bytes pass through. Returns None when an escape is
    malformed or the decoded bytes are not valid UTF-8.
    """
    data = encoded.encode("utf-8", errors="surrogateescape")
    decoded = bytearray()
    i = 0
    while i < len(data):
        if data[i] != ord("%"):
            decoded.append(data[i])
            i += 1
            continue
        escape = data[i + 1:i + 3]
        if len(escape) != 2 or not all(b in _HEX_DIGITS for b in escape):
            return None
        decoded.append(int(escape, 16))
        i += 3
    try:
        return decoded.decode("utf-8")
    except UnicodeDecodeError:
        return None


def encode_assuan_data(text: str) -> str:
    """Percent-escape ``text`` the way an Assuan server would (inverse of decode)."""
    out = []
    for byte in text.encode("utf-8"):
        if byte == ord("%") or byte < 0x20 or byte == 0x7f:
            out.append(f"%{byte:02X}")
        else:
            out.append(chr(byte))
    # non-ASCII bytes were appended as latin-1 code points, map them back to UTF-8
    return "".join(out).encode("latin-1").decode("utf-8")


def build_getpin_request(url: str, title: str = "git passphrase") -> str:
    """Build the four-line request asking pinentry for a passphrase."""
    return (
        f"SETTITLE {title}\n"
        f"SETDESC Enter passphrase for {url}\n"
        "SETPROMPT Passphrase:\n"
        "GETPIN\n"
    )


def parse_getpin_response(output: str) -> Optional[str]:
    """Extract the secret from the first ``D`` line of a pinentry response."""
    for line in output.split("\n"):
        if not line.startswith("D "):
            continue
        return decode_assuan_data(line[2:])
    return None


def pinentry_get_pw(
    url: str,
    program: str = "pinentry",
    timeout: Optional[float] = None,
    title: str = "git passphrase",
) -> Optional[str]:
    """
    Ask a pinentry helper for the passphrase of ``url``.

    Every failure (helper missing, broken pipe, timeout, no data line,
    undecodable data) returns None so the caller can fall back to another
    source. The secret itself is never logged.

    Args:
        url: Remote URL the passphrase is for, shown to the operator
        program: pinentry executable to run
        timeout: Seconds to wait for the helper, None to wait indefinitely
        title: Window title shown by the helper

    Returns:
        The passphrase, or None if pinentry did not provide one
    """
    try:
        pinentry = subprocess.Popen(
            [program],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
        )
    except OSError as e:
        logger.debug(f"Could not start {program}: {e}")
        return None

    request = build_getpin_request(url, title).encode("utf-8")
    try:
        out, _ = pinentry.communicate(request, timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.debug(f"{program} did not answer within {timeout}s")
        pinentry.kill()
        pinentry.communicate()
        return None
    except OSError as e:
        logger.debug(f"Failed to talk to {program}: {e}")
        pinentry.wait()
        return None

    secret = parse_getpin_response(out.decode("utf-8", errors="surrogateescape"))
    if secret is None:
        logger.debug(f"{program} returned no usable passphrase")
    return secret
