"""Tests for the browser opener."""
import subprocess
import sys
import time
import pytest
from bandwidth_core import opener
from bandwidth_core.exceptions import OpenUrlError
from bandwidth_core.opener import BrowserOpener, open_url, opener_command


class FakeProc:
    def __init__(self, code=0, hang=False):
        self.code = code
        self.hang = hang

    def wait(self, timeout=None):
        if self.hang:
            raise subprocess.TimeoutExpired("opener", timeout)
        return self.code

    def poll(self):
        return None if self.hang else self.code


@pytest.fixture
def spawned(monkeypatch):
    calls = []
    monkeypatch.setattr(opener.shutil, "which", lambda name: f"/usr/bin/{name}")

    def install(proc):
        def fake_popen(cmd, **kwargs):
            calls.append(cmd)
            return proc
        monkeypatch.setattr(opener.subprocess, "Popen", fake_popen)
        return calls

    return install


class TestOpenerCommand:
    """Test per-platform commands."""

    def test_platforms(self):
        url = "https://cdn.sanity.io/x"
        assert opener_command(url, "darwin") == ["open", url]
        assert opener_command(url, "windows") == ["cmd", "/C", "start", "", url]
        assert opener_command(url, "linux") == ["xdg-open", url]


class TestOpenUrl:
    """Test launching and failure reporting."""

    def test_success(self, spawned):
        calls = spawned(FakeProc(0))
        open_url("https://cdn.sanity.io/x", system="linux")
        assert calls == [["xdg-open", "https://cdn.sanity.io/x"]]

    def test_still_running_counts_as_success(self, spawned):
        spawned(FakeProc(hang=True))
        open_url("https://cdn.sanity.io/x", system="linux", wait=0.01)

    def test_non_zero_exit(self, spawned):
        spawned(FakeProc(3))
        with pytest.raises(OpenUrlError, match="status 3"):
            open_url("https://cdn.sanity.io/x", system="linux")

    def test_missing_opener(self, monkeypatch):
        monkeypatch.setattr(opener.shutil, "which", lambda name: None)
        with pytest.raises(OpenUrlError, match="not found"):
            open_url("https://cdn.sanity.io/x", system="linux")

    def test_spawn_failure(self, monkeypatch):
        monkeypatch.setattr(opener.shutil, "which", lambda name: "/usr/bin/xdg-open")

        def broken(cmd, **kwargs):
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(opener.subprocess, "Popen", broken)
        with pytest.raises(OpenUrlError, match="failed to run"):
            open_url("https://cdn.sanity.io/x", system="linux")

    def test_still_running_returns_process(self, spawned):
        proc = FakeProc(hang=True)
        spawned(proc)
        assert open_url("https://cdn.sanity.io/x", system="linux") is proc

    def test_long_running_opener_does_not_block(self, monkeypatch):
        """Test a real opener that keeps running returns within the poll window."""
        cmd = [sys.executable, "-c", "import time; time.sleep(5)"]
        monkeypatch.setattr(opener, "opener_command", lambda url, system=None: cmd)
        start = time.monotonic()
        proc = open_url("https://cdn.sanity.io/x")
        elapsed = time.monotonic() - start
        try:
            assert proc is not None
            assert elapsed < 1.0
        finally:
            if proc is not None:
                proc.kill()
                proc.wait()

    def test_blank_url_is_noop(self, spawned):
        calls = spawned(FakeProc(0))
        open_url("   ", system="linux")
        assert calls == []


class TestBrowserOpener:
    """Test tracking of openers left running."""

    def test_running_opener_kept_then_reaped(self, spawned):
        proc = FakeProc(hang=True)
        spawned(proc)
        browser = BrowserOpener(system="linux")
        browser("https://cdn.sanity.io/x")
        assert browser.running == [proc]

        proc.hang = False
        browser.reap()
        assert browser.running == []

    def test_finished_opener_not_kept(self, spawned):
        spawned(FakeProc(0))
        browser = BrowserOpener(system="linux")
        browser("https://cdn.sanity.io/x")
        assert browser.running == []

    def test_failure_propagates(self, spawned):
        spawned(FakeProc(1))
        with pytest.raises(OpenUrlError):
            BrowserOpener(system="linux")("https://cdn.sanity.io/x")
