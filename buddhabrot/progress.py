import threading
import time

from tqdm import tqdm


class ProgressCounter:
    """
    Completed-trial counter shared by sampling workers.

    Owned by the caller of `sample`; workers only ever increment it.
    """

    def __init__(self, total: int = 0):
        self.total = int(total)
        self._value = 0
        self._lock = threading.Lock()

    def increment(self, amount: int = 1) -> int:
        with self._lock:
            self._value += amount
            return self._value

    @property
    def value(self) -> int:
        return self._value

    def reset(self, total: int = None):
        with self._lock:
            self._value = 0
            if total is not None:
                self.total = int(total)


class ProgressMonitor:
    """
    Background thread that mirrors a ProgressCounter onto a tqdm bar.

    The sampling loop never waits on the display; the monitor polls.
    """

    def __init__(self, counter: ProgressCounter, desc: str = "Sampling", interval: float = 0.1, disable: bool = False):
        self.counter = counter
        self.desc = desc
        self.interval = interval
        self.disable = disable
        self._stop = threading.Event()
        self._thread = None

    def _run(self):
        pbar = tqdm(total=self.counter.total, desc=self.desc, unit="trials",
                    unit_scale=True, disable=self.disable)
        last = 0
        while True:
            stopping = self._stop.wait(self.interval)
            current = self.counter.value
            if current > last:
                pbar.update(current - last)
                last = current
            if stopping:
                break
        pbar.close()

    def start(self):
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        return self

    def stop(self):
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False
