#!/usr/bin/env python3
"""
Unit tests for the credential resolver.

Validates the fallback order between pinentry and the terminal, the
username+password flow, prompt serialization and callback wiring.
"""

import sys
import threading
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

# Add the project root to the path so we can import gitremote modules
sys.path.insert(0, str(Path(__file__).parent))

from gitremote.config import Config
from gitremote.credentials.resolver import CredentialResolver, RemoteCallbacks, with_remote_git_callbacks
from gitremote.progress import TransferProgress

URL = "https://example.com/repo.git"


class FakeUi:
    """Ui double that answers prompts from canned values and records them."""

    def __init__(self, username="alice", password="pw", progress=None, config=None):
        self.config = config or Config()
        self.username = username
        self.password = password
        self.progress = progress
        self.prompts = []

    def prompt(self, text):
        self.prompts.append(("prompt", text))
        if isinstance(self.username, BaseException):
            raise self.username
        return self.username

    def prompt_password(self, text):
        self.prompts.append(("password", text))
        if isinstance(self.password, BaseException):
            raise self.password
        return self.password

    def progress_output(self):
        return self.progress


class TestPasswordFallback(unittest.TestCase):
    """Password-only auth: pinentry first, then the terminal."""

    @patch("gitremote.credentials.resolver.pinentry_get_pw", return_value="from-pinentry")
    def test_pinentry_wins(self, mock_pinentry):
        ui = FakeUi()
        resolver = CredentialResolver(ui)

        self.assertEqual(resolver.get_password(URL, "git"), "from-pinentry")
        self.assertEqual(ui.prompts, [])
        self.assertEqual(mock_pinentry.call_args[0][0], URL)

    @patch("gitremote.credentials.resolver.pinentry_get_pw", return_value=None)
    def test_falls_back_to_terminal(self, mock_pinentry):
        ui = FakeUi(password="typed")
        resolver = CredentialResolver(ui)

        self.assertEqual(resolver.get_password(URL, "git"), "typed")
        self.assertEqual(ui.prompts, [("password", f"Passphrase for {URL}: ")])

    @patch("gitremote.credentials.pinentry.subprocess.Popen")
    def test_malformed_pinentry_response_falls_back_to_terminal(self, mock_popen):
        process = MagicMock()
        process.communicate.return_value = (b"OK\nD ab%4\nOK\n", None)
        mock_popen.return_value = process
        ui = FakeUi(password="typed")

        self.assertEqual(CredentialResolver(ui).get_password(URL, "git"), "typed")
        self.assertEqual(ui.prompts, [("password", f"Passphrase for {URL}: ")])
        print("  ✓ Malformed pinentry data fell back to the terminal prompt")

    @patch("gitremote.credentials.resolver.pinentry_get_pw", return_value=None)
    def test_both_sources_empty(self, mock_pinentry):
        ui = FakeUi(password=EOFError())
        self.assertIsNone(CredentialResolver(ui).get_password(URL, "git"))

    @patch("gitremote.credentials.resolver.pinentry_get_pw", return_value=None)
    def test_no_terminal(self, mock_pinentry):
        ui = FakeUi(password=OSError("not a terminal"))
        self.assertIsNone(CredentialResolver(ui).get_password(URL, "git"))

    @patch("gitremote.credentials.resolver.pinentry_get_pw")
    def test_pinentry_can_be_disabled(self, mock_pinentry):
        ui = FakeUi(password="typed")
        resolver = CredentialResolver(ui, Config(use_pinentry=False))

        self.assertEqual(resolver.get_password(URL, "git"), "typed")
        mock_pinentry.assert_not_called()

    @patch("gitremote.credentials.resolver.pinentry_get_pw", return_value="pw")
    def test_pinentry_settings_come_from_config(self, mock_pinentry):
        config = Config(pinentry_program="pinentry-curses", pinentry_timeout=30.0, pinentry_title="t")
        CredentialResolver(FakeUi(), config).get_password(URL, "git")

        mock_pinentry.assert_called_once_with(
            URL, program="pinentry-curses", timeout=30.0, title="t"
        )


class TestUsernamePassword(unittest.TestCase):
    """Username+password auth from the terminal."""

    def test_both_prompts_succeed(self):
        ui = FakeUi(username="alice", password="pw")

        self.assertEqual(CredentialResolver(ui).get_username_password(URL), ("alice", "pw"))
        self.assertEqual(
            ui.prompts,
            [("prompt", f"Username for {URL}"), ("password", f"Passphrase for {URL}: ")],
        )

    def test_username_failure(self):
        ui = FakeUi(username=EOFError())

        self.assertIsNone(CredentialResolver(ui).get_username_password(URL))
        self.assertEqual(len(ui.prompts), 1)

    def test_password_failure(self):
        ui = FakeUi(password=OSError())
        self.assertIsNone(CredentialResolver(ui).get_username_password(URL))

    def test_lock_released_after_failure(self):
        ui = FakeUi(username=EOFError())
        resolver = CredentialResolver(ui)

        resolver.get_username_password(URL)

        self.assertTrue(resolver._prompt_lock.acquire(blocking=False))
        resolver._prompt_lock.release()


class TestPromptSerialization(unittest.TestCase):
    """Prompts from concurrent callbacks never overlap."""

    @patch("gitremote.credentials.resolver.pinentry_get_pw", return_value=None)
    def test_prompts_do_not_overlap(self, mock_pinentry):
        in_prompt = threading.Event()
        overlaps = []
        active = [0]

        class SlowUi(FakeUi):
            def prompt_password(self, text):
                active[0] += 1
                if active[0] > 1:
                    overlaps.append(text)
                in_prompt.set()
                threading.Event().wait(0.05)
                active[0] -= 1
                return "pw"

        resolver = CredentialResolver(SlowUi())
        threads = [
            threading.Thread(target=resolver.get_password, args=(f"{URL}/{i}", "git"))
            for i in range(4)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        self.assertTrue(in_prompt.is_set())
        self.assertEqual(overlaps, [])


class TestCallbackWiring(unittest.TestCase):
    """with_remote_git_callbacks builds the callback slots."""

    def test_ssh_keys_slot_uses_config(self):
        config = Config(ssh_dir=Path("/nonexistent/keys"))
        callbacks = CredentialResolver(FakeUi(), config).callbacks()

        with patch("gitremote.credentials.resolver.get_ssh_keys", return_value=[]) as mock_keys:
            self.assertEqual(callbacks.get_ssh_keys("git"), [])
        mock_keys.assert_called_once_with(
            "git", ssh_dir=Path("/nonexistent/keys"), key_names=config.ssh_key_names
        )

    def test_all_credential_slots_are_set(self):
        received = with_remote_git_callbacks(FakeUi(), lambda callbacks: callbacks)

        self.assertIsInstance(received, RemoteCallbacks)
        self.assertIsNotNone(received.get_ssh_keys)
        self.assertIsNotNone(received.get_password)
        self.assertIsNotNone(received.get_username_password)

    def test_no_progress_without_progress_output(self):
        received = with_remote_git_callbacks(FakeUi(progress=None), lambda callbacks: callbacks)
        self.assertIsNone(received.progress)

    def test_progress_wired_when_available(self):
        output = MagicMock()
        output.term_width.return_value = 40
        received = with_remote_git_callbacks(FakeUi(progress=output), lambda callbacks: callbacks)

        self.assertIsNotNone(received.progress)
        # completion before anything was drawn writes nothing
        received.progress(TransferProgress(overall=1.0))
        output.write.assert_not_called()

    def test_returns_result_of_function(self):
        self.assertEqual(with_remote_git_callbacks(FakeUi(), lambda callbacks: 42), 42)


if __name__ == "__main__":
    unittest.main()
