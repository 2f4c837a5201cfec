# io/recorder.py
import json
import logging
import sys
from dataclasses import asdict

from route_sim.app.protocols import RecordSink

log = logging.getLogger(__name__)


class JsonlSink:
    def __init__(self, fp=None):
        self.fp = fp  # None => whatever sys.stdout is at write time

    def write(self, record) -> None:
        (self.fp or sys.stdout).write(json.dumps(asdict(record)) + "\n")


class MemorySink:
    def __init__(self):
        self.records: list = []

    def write(self, record) -> None:
        self.records.append(record)


class Recorder:
    def __init__(self, *sinks: RecordSink):
        self.sinks = list(sinks)

    def add(self, sink: RecordSink) -> None:
        self.sinks.append(sink)

    def emit(self, record) -> None:
        for s in self.sinks:
            try:
                s.write(record)
            except Exception:
                # a broken sink never stops the traversal
                log.exception("sink %s failed on %s", type(s).__name__, record.name)
