import signal
import threading
from contextlib import contextmanager

class CancelFlag:
    """Polled cancellation request. Calling the flag returns whether cancellation has been requested."""

    def __init__(self):
        self._event = threading.Event()

    def request(self):
        self._event.set()

    def clear(self):
        self._event.clear()

    def __call__(self):
        return self._event.is_set()

@contextmanager
def cancel_on_signals(flag, signums = (signal.SIGINT, signal.SIGTERM)):

    def handler(*_):
        flag.request()

    previous = {}

    for signum in signums:
        previous[signum] = signal.signal(signum, handler)

    try:
        yield flag

    finally:

        for signum, prev_handler in previous.items():
            signal.signal(signum, prev_handler if prev_handler is not None else signal.SIG_DFL)

def never_cancelled():
    return False
