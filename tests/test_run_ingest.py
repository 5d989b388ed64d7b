import json
import signal

import run_ingest
from auction_ingest import ingest
from auction_ingest.config import settings
from auction_ingest.ingest import RunStatus, RunSummary


class StubOrchestrator:
    def __init__(self, summary):
        self.summary = summary

    def run(self):
        return self.summary


def test_run_prints_summary_and_exits_zero(monkeypatch, capsys):
    summary = RunSummary(status=RunStatus.COMPLETE, pages_attempted=1, succeeded=2)
    monkeypatch.setattr(ingest, "build_orchestrator", lambda s: StubOrchestrator(summary))

    assert run_ingest.main([]) == 0

    out = capsys.readouterr().out
    printed = json.loads(out[out.index("{"):])
    assert printed["status"] == "complete"
    assert printed["succeeded"] == 2


def test_aborted_run_exits_nonzero(monkeypatch):
    summary = RunSummary(status=RunStatus.ABORTED, error="listing page 1 request failed")
    monkeypatch.setattr(ingest, "build_orchestrator", lambda s: StubOrchestrator(summary))

    assert run_ingest.main([]) == 1


def test_page_size_override(monkeypatch):
    monkeypatch.setattr(settings.ingest, "page_size", 100)
    seen = {}

    def build(s):
        seen["page_size"] = s.ingest.page_size
        return StubOrchestrator(RunSummary(status=RunStatus.EMPTY))

    monkeypatch.setattr(ingest, "build_orchestrator", build)
    run_ingest.main(["--page-size", "50"])

    assert seen["page_size"] == 50


def test_sigterm_requests_stop(monkeypatch):
    class SignalledOrchestrator:
        stopped = False

        def run(self):
            handler = signal.getsignal(signal.SIGTERM)
            handler(signal.SIGTERM, None)
            status = RunStatus.ABORTED if self.stopped else RunStatus.COMPLETE
            return RunSummary(status=status, error="interrupted")

        def request_stop(self):
            self.stopped = True

    before = signal.getsignal(signal.SIGTERM)
    monkeypatch.setattr(ingest, "build_orchestrator", lambda s: SignalledOrchestrator())

    assert run_ingest.main([]) == 1
    assert signal.getsignal(signal.SIGTERM) is before
