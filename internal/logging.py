import asyncio
import json
import os
import sys
import threading
from enum import IntEnum
from utils.clock import format_timestamp

class LogLevel(IntEnum):
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

_logger = None
_logger_lock = threading.Lock()

class StructuredLogger:
    """JSON-lines logger on stderr. bind() returns a child carrying fixed fields."""

    def __init__(self, level=LogLevel.INFO, fields=None, stream=None):
        self.level = level
        self.fields = fields or {}
        self.stream = stream

    def bind(self, **fields):
        return StructuredLogger(self.level, {**self.fields, **fields}, self.stream)

    def _emit(self, level, message, error=None, **kwargs):
        if level < self.level:
            return
        try:
            record = {"timestamp": format_timestamp(), "level": level.name, "msg": message, **self.fields, **kwargs}
            if error:
                record["err"] = str(error)
            print(json.dumps(record, default=str), file=self.stream or sys.stderr, flush=True)
        except Exception:
            pass

    def debug(self, message, **kwargs):
        self._emit(LogLevel.DEBUG, message, **kwargs)

    def info(self, message, **kwargs):
        self._emit(LogLevel.INFO, message, **kwargs)

    def warn(self, message, error=None, **kwargs):
        self._emit(LogLevel.WARN, message, error, **kwargs)

    def error(self, message, error=None, **kwargs):
        self._emit(LogLevel.ERROR, message, error, **kwargs)

    @classmethod
    def configure(cls, min_level=LogLevel.INFO):
        global _logger
        with _logger_lock:
            _logger = cls(min_level)

def parse_level(name):
    try:
        return LogLevel[name.upper()]
    except KeyError:
        return LogLevel.INFO

def get_logger(**fields):
    global _logger
    if _logger is None:
        with _logger_lock:
            if _logger is None:
                _logger = StructuredLogger()
    return _logger.bind(**fields) if fields else _logger


class AsyncFileLogger:
    """Drains scene events into a JSON-lines file without blocking the frame loop."""

    def __init__(self, file_path, queue_size=1000, batch_size=64):
        self.path = file_path
        self.batch_size = batch_size
        self.queue = asyncio.Queue(maxsize=queue_size)
        self._task = None
        self._stop = asyncio.Event()
        self._file_missing_logged = False
        self.written = 0
        self.dropped = 0

    def try_log(self, kind, data):
        try:
            self.queue.put_nowait({"timestamp": format_timestamp(), "kind": kind, "data": data})
            return True
        except asyncio.QueueFull:
            self.dropped += 1
        return False

    async def start(self):
        if self._task:
            return
        dir_path = os.path.dirname(self.path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)
        self._stop.clear()
        self._task = asyncio.create_task(self._run())

    async def stop(self):
        self._stop.set()
        if self._task:
            await self._task
            self._task = None

    def get_stats(self):
        return {
            "queued": self.queue.qsize(),
            "written": self.written,
            "dropped": self.dropped
        }

    def _drain(self, first):
        batch = [first]
        while len(batch) < self.batch_size and not self.queue.empty():
            batch.append(self.queue.get_nowait())
        return batch

    def _write(self, file, batch):
        file.write("".join(json.dumps(record, default=str) + "\n" for record in batch))
        file.flush()
        self.written += len(batch)

    async def _run(self):
        log = get_logger(component="file_logger")
        file = open(self.path, "a")
        try:
            while not self._stop.is_set():
                try:
                    first = await asyncio.wait_for(self.queue.get(), timeout=0.5)
                except asyncio.TimeoutError:
                    continue
                batch = self._drain(first)

                # Rotated or deleted underneath us: count the batch as lost
                if not os.path.exists(self.path):
                    if not self._file_missing_logged:
                        log.warn("event log missing, dropping records", path=self.path)
                        self._file_missing_logged = True
                    self.dropped += len(batch)
                    continue

                try:
                    self._write(file, batch)
                except OSError as exc:
                    self.dropped += len(batch)
                    log.warn("event log write failed", error=exc, path=self.path)

            rest = [self.queue.get_nowait() for _ in range(self.queue.qsize())]
            if rest and os.path.exists(self.path):
                self._write(file, rest)
        finally:
            file.close()
