"""Tests for cancellation.py -- token and SIGINT routing."""

import signal
import threading

import pytest

from audio_library_cleanup.cancellation import CancellationToken, handle_interrupts
from audio_library_cleanup.errors import USER_INTERRUPTION_MESSAGE, CleanupInterrupted


class TestCancellationToken:
    def test_starts_clear(self):
        token = CancellationToken()
        assert token.cancelled is False
        token.check()

    def test_cancel_trips_check(self):
        token = CancellationToken()
        token.cancel()
        assert token.cancelled is True
        with pytest.raises(CleanupInterrupted, match=USER_INTERRUPTION_MESSAGE):
            token.check()


class TestHandleInterrupts:
    def test_first_sigint_cancels_token(self):
        token = CancellationToken()
        with handle_interrupts(token):
            handler = signal.getsignal(signal.SIGINT)
            handler(signal.SIGINT, None)
            assert token.cancelled is True

    def test_second_sigint_raises_keyboard_interrupt(self):
        token = CancellationToken()
        with handle_interrupts(token):
            handler = signal.getsignal(signal.SIGINT)
            handler(signal.SIGINT, None)
            with pytest.raises(KeyboardInterrupt):
                handler(signal.SIGINT, None)

    def test_previous_handler_restored(self):
        previous = signal.getsignal(signal.SIGINT)
        with handle_interrupts(CancellationToken()):
            assert signal.getsignal(signal.SIGINT) is not previous
        assert signal.getsignal(signal.SIGINT) is previous

    def test_worker_thread_leaves_handler_alone(self):
        previous = signal.getsignal(signal.SIGINT)
        seen = []

        def worker():
            with handle_interrupts(CancellationToken()):
                seen.append(signal.getsignal(signal.SIGINT))

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()
        assert seen == [previous]
