from __future__ import annotations

import io
from pathlib import Path

import pytest

from av1sweep.domain.dataclasses.decision import BitrateTarget, CrfTarget
from av1sweep.services.encode import ffmpeg_adapter as enc_mod
from av1sweep.services.encode.ffmpeg_adapter import FFmpegEncoder, FFmpegError

FFMPEG = "/opt/ffmpeg/bin/ffmpeg"

NOISY_STDERR = (
    "Svt[info]: -------------------------------------------\n"
    "Svt[info]: SVT [version]:\tSVT-AV1 Encoder Lib v2.1.0\n"
    "SvtMalloc[info]: allocated memory 1024 MB\n"
    "[matroska @ 0x5555] Starting new cluster\n"
)


class _FakePopen:
    """Stands in for ffmpeg: writes the output file, emits stderr, exits with `rc`."""
    rc = 0
    stderr_text = NOISY_STDERR
    write_output = True
    calls: list = []
    killed = False

    def __init__(self, cmd, **kwargs):
        type(self).calls.append((cmd, kwargs))
        if self.write_output:
            Path(cmd[-1]).write_bytes(b"AV1 PAYLOAD")
        self.stderr = io.BytesIO(self.stderr_text.encode())
        self.waits = 0

    def kill(self):
        type(self).killed = True

    def wait(self):
        self.waits += 1
        type(self).last = self
        return -9 if self.killed else self.rc


@pytest.fixture()
def fake_popen(monkeypatch):
    class Fake(_FakePopen):
        calls = []
        killed = False

    monkeypatch.setattr(enc_mod.subprocess, "Popen", Fake)
    return Fake


def _encoder(diag=None, **kw):
    return FFmpegEncoder(FFMPEG, diag_stream=diag or io.StringIO(), **kw)


def test_success_replaces_original(tmp_path, make_file, fake_popen):
    src = make_file(tmp_path / "Show - 01.mkv", b"H264 PAYLOAD")
    diag = io.StringIO()

    res = _encoder(diag).encode(src, CrfTarget(31))

    assert res.ok is True
    assert res.returncode == 0
    assert src.read_bytes() == b"AV1 PAYLOAD"
    assert not (tmp_path / "Show - 01.mkv.tmp").exists()

    [(cmd, kwargs)] = fake_popen.calls
    assert cmd[0] == FFMPEG
    assert cmd[-1] == str(tmp_path / "Show - 01.mkv.tmp")
    assert cmd[cmd.index("-crf:v:0") + 1] == "31"
    assert cmd[cmd.index("-f") + 1] == "matroska"
    assert kwargs["stdin"] == enc_mod.subprocess.DEVNULL


def test_noise_is_filtered_from_diagnostics(tmp_path, make_file, fake_popen):
    src = make_file(tmp_path / "a.mp4")
    diag = io.StringIO()
    _encoder(diag).encode(src, CrfTarget(26))
    assert diag.getvalue() == "[matroska @ 0x5555] Starting new cluster\n"


def test_failure_keeps_original_and_removes_temp(tmp_path, make_file, fake_popen):
    fake_popen.rc = 1
    fake_popen.stderr_text = "Svt[info]: hello\nSvt[error]: Instance 1: Invalid CRF\n"
    src = make_file(tmp_path / "movie.mp4", b"ORIGINAL")
    before = src.stat().st_mtime_ns
    diag = io.StringIO()

    res = _encoder(diag).encode(src, BitrateTarget(4000))

    assert res.ok is False
    assert res.returncode == 1
    assert "status 1" in res.message
    assert src.read_bytes() == b"ORIGINAL"
    assert src.stat().st_mtime_ns == before
    assert not (tmp_path / "movie.mp4.tmp").exists()
    assert diag.getvalue() == "Svt[error]: Instance 1: Invalid CRF\n"


def test_launch_error_is_a_failure(tmp_path, make_file, monkeypatch):
    def boom(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    monkeypatch.setattr(enc_mod.subprocess, "Popen", boom)
    src = make_file(tmp_path / "a.mkv", b"ORIGINAL")
    res = _encoder().encode(src, CrfTarget(30))
    assert res.ok is False
    assert res.returncode is None
    assert "launch" in res.message
    assert src.read_bytes() == b"ORIGINAL"


def test_bitrate_target_command(tmp_path, make_file, fake_popen):
    src = make_file(tmp_path / "clip.TS")
    _encoder(preset=8).encode(src, BitrateTarget(1700))
    [(cmd, _)] = fake_popen.calls
    assert cmd[cmd.index("-b:v:0") + 1] == "1700k"
    assert cmd[cmd.index("-preset") + 1] == "8"
    assert cmd[cmd.index("-f") + 1] == "mpegts"
    assert "-crf:v:0" not in cmd


def test_custom_temp_suffix(tmp_path, make_file, fake_popen):
    src = make_file(tmp_path / "a.webm")
    _encoder(temp_suffix=".part").encode(src, CrfTarget(30))
    [(cmd, _)] = fake_popen.calls
    assert cmd[-1].endswith("a.webm.part")


def test_default_binary_must_be_on_path(monkeypatch):
    monkeypatch.setattr(enc_mod.shutil, "which", lambda name: None)
    with pytest.raises(FFmpegError):
        FFmpegEncoder()


def test_progress_redraws_are_forwarded_unchanged(tmp_path, make_file, fake_popen):
    fake_popen.stderr_text = (
        "Svt[info]: tiles 1\n"
        "frame=   24 fps=12 q=0.0 size=256kB\r"
        "frame=   48 fps=12 q=0.0 size=512kB\r"
        "\n"
    )
    diag = io.StringIO()
    _encoder(diag).encode(make_file(tmp_path / "a.mkv"), CrfTarget(26))
    assert diag.getvalue() == (
        "frame=   24 fps=12 q=0.0 size=256kB\r"
        "frame=   48 fps=12 q=0.0 size=512kB\r"
        "\n"
    )


class _BrokenDiag(io.StringIO):
    def write(self, s):
        raise BrokenPipeError(32, "Broken pipe")


def test_diagnostics_failure_kills_ffmpeg_and_removes_temp(tmp_path, make_file, fake_popen):
    src = make_file(tmp_path / "movie.mkv", b"ORIGINAL")

    res = _encoder(_BrokenDiag()).encode(src, CrfTarget(26))

    assert res.ok is False
    assert "forwarding" in res.message
    assert fake_popen.killed is True
    assert fake_popen.last.waits >= 1
    assert fake_popen.last.stderr.closed
    assert src.read_bytes() == b"ORIGINAL"
    assert not (tmp_path / "movie.mkv.tmp").exists()


def test_interrupt_while_forwarding_removes_temp_and_propagates(tmp_path, make_file, fake_popen):
    class _Interrupting(io.StringIO):
        def write(self, s):
            raise KeyboardInterrupt

    src = make_file(tmp_path / "movie.mkv", b"ORIGINAL")
    with pytest.raises(KeyboardInterrupt):
        _encoder(_Interrupting()).encode(src, CrfTarget(26))
    assert fake_popen.killed is True
    assert src.read_bytes() == b"ORIGINAL"
    assert not (tmp_path / "movie.mkv.tmp").exists()
