"""
GIT_ASKPASS bridge between git and the credential callbacks.

git runs the helper with a prompt such as ``Username for 'https://host': ``
and reads the answer from the helper's stdout. The helper forwards the prompt
over a loopback socket to the process running the fetch, which answers it from
the ``get_username_password``/``get_password`` slots of ``RemoteCallbacks``.

Run as ``python -m gitremote.credentials.askpass <prompt>``.
"""

import logging
import os
import platform
import re
import secrets
import shlex
import shutil
import socket
import socketserver
import sys
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple
from urllib.parse import unquote, urlsplit, urlunsplit

from ..config import load_configuration
from ..errors import ConfigurationError
from ..logging_setup import setup_logging
from .resolver import RemoteCallbacks

PORT_ENV = "GITREMOTE_ASKPASS_PORT"
TOKEN_ENV = "GITREMOTE_ASKPASS_TOKEN"

PROMPT_RE = re.compile(r"^(Username|Password) for '(.+)': ?$")

logger = logging.getLogger('gitremote.credentials.askpass')


def parse_prompt(prompt: str) -> Optional[Tuple[str, str, Optional[str]]]:
    """
    Split a git credential prompt into its parts.

    Returns:
        ``(kind, url, username)`` where kind is "username" or "password", url
        has any userinfo removed and username is the one git embedded in the
        URL (or None). None if the prompt is not a credential prompt.
    """
    match = PROMPT_RE.match(prompt.rstrip("\r\n"))
    if match is None:
        return None
    kind = match.group(1).lower()
    url = match.group(2)
    parts = urlsplit(url)
    username = None
    if "@" in parts.netloc:
        userinfo, host = parts.netloc.rsplit("@", 1)
        username = unquote(userinfo.split(":", 1)[0])
        url = urlunsplit(parts._replace(netloc=host))
    return kind, url, username


class AskpassResponder:
    """
    Answers git's prompts from the callback slots.

    git asks for the username and then the password in two separate helper
    runs. A username+password pair obtained for the first prompt is held
    until the matching password prompt arrives, then dropped.
    """

    def __init__(self, callbacks: RemoteCallbacks):
        self.callbacks = callbacks
        self._pending: Dict[str, Tuple[str, str]] = {}
        self._lock = threading.Lock()

    def answer(self, prompt: str) -> Optional[str]:
        parsed = parse_prompt(prompt)
        if parsed is None:
            logger.debug(f"Ignoring unrecognized askpass prompt: {prompt!r}")
            return None
        kind, url, username = parsed

        with self._lock:
            if kind == "username":
                if self.callbacks.get_username_password is None:
                    return None
                credentials = self.callbacks.get_username_password(url)
                if credentials is None:
                    logger.debug(f"No username and password for {url}")
                    return None
                self._pending[url] = credentials
                return credentials[0]

            pending = self._pending.pop(url, None)
            if pending is not None and username in (None, pending[0]):
                return pending[1]
            if self.callbacks.get_password is None:
                return None
            return self.callbacks.get_password(url, username or "")

    def forget(self) -> None:
        with self._lock:
            self._pending.clear()


class _AskpassHandler(socketserver.StreamRequestHandler):

    def handle(self):
        token = self.rfile.readline().rstrip(b"\n")
        prompt = self.rfile.readline().decode("utf-8", errors="replace").rstrip("\n")
        if not secrets.compare_digest(token, self.server.token.encode("ascii")):
            logger.warning("Rejected askpass request with a bad token")
            return
        answer = self.server.responder.answer(prompt)
        if answer is None:
            self.wfile.write(b"0\n")
        else:
            self.wfile.write(b"1\n" + answer.encode("utf-8") + b"\n")


class AskpassServer(socketserver.ThreadingTCPServer):
    """Loopback server the helper forwards prompts to. Requests must carry ``token``."""

    daemon_threads = True

    def __init__(self, responder: AskpassResponder):
        super().__init__(("127.0.0.1", 0), _AskpassHandler)
        self.responder = responder
        self.token = secrets.token_hex(16)

    @property
    def port(self) -> int:
        return self.server_address[1]


def request_answer(prompt: str, port: int, token: str) -> Optional[str]:
    """Forward ``prompt`` to the server on ``port``. None if it has no answer."""
    prompt = prompt.replace("\n", " ")
    with socket.create_connection(("127.0.0.1", port)) as sock:
        sock.sendall(f"{token}\n{prompt}\n".encode("utf-8"))
        with sock.makefile("rb") as reply:
            if reply.readline().strip() != b"1":
                return None
            return reply.readline().decode("utf-8").rstrip("\n")


def _write_helper(directory: Path) -> Path:
    if platform.system() == "Windows":
        helper = directory / "askpass.bat"
        helper.write_text(f'@"{sys.executable}" -m gitremote.credentials.askpass %*\r\n')
    else:
        helper = directory / "askpass.sh"
        helper.write_text(
            "#!/bin/sh\n"
            f'exec {shlex.quote(sys.executable)} -m gitremote.credentials.askpass "$@"\n'
        )
        helper.chmod(0o700)
    return helper


@contextmanager
def askpass_environment(callbacks: RemoteCallbacks) -> Iterator[Dict[str, str]]:
    """
    Serve git's credential prompts from ``callbacks`` for the duration of the block.

    Yields the environment variables to run git with. ``GIT_TERMINAL_PROMPT``
    is turned off so git never prompts on its own.
    """
    responder = AskpassResponder(callbacks)
    server = AskpassServer(responder)
    thread = threading.Thread(target=server.serve_forever, name="gitremote-askpass", daemon=True)
    thread.start()
    helper_dir = Path(tempfile.mkdtemp(prefix="gitremote-askpass-"))

    try:
        helper = _write_helper(helper_dir)
        package_root = str(Path(__file__).resolve().parents[2])
        pythonpath = os.pathsep.join(filter(None, [package_root, os.environ.get("PYTHONPATH")]))
        logger.debug(f"askpass helper at {helper} talking to port {server.port}")
        yield {
            "GIT_ASKPASS": str(helper),
            "GIT_TERMINAL_PROMPT": "0",
            PORT_ENV: str(server.port),
            TOKEN_ENV: server.token,
            "PYTHONPATH": pythonpath,
        }
    finally:
        server.shutdown()
        server.server_close()
        thread.join()
        responder.forget()
        shutil.rmtree(helper_dir, ignore_errors=True)


def main(argv: Optional[List[str]] = None) -> int:
    """Helper entry point. Prints the answer for git and exits 0, or exits 1."""
    argv = sys.argv[1:] if argv is None else argv
    try:
        setup_logging(load_configuration())
    except ConfigurationError as e:
        print(f"gitremote askpass: {e}", file=sys.stderr)
        return 1

    port = os.environ.get(PORT_ENV)
    token = os.environ.get(TOKEN_ENV)
    if not port or not token:
        logger.error("askpass helper started outside a gitremote fetch")
        return 1

    prompt = argv[0] if argv else ""
    try:
        answer = request_answer(prompt, int(port), token)
    except (OSError, ValueError) as e:
        logger.error(f"Could not reach the credential resolver: {e}", extra={'operation': 'askpass'})
        return 1

    if answer is None:
        logger.debug("No credential for prompt", extra={'operation': 'askpass'})
        return 1
    sys.stdout.write(answer + "\n")
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
