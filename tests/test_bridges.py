"""
Tests for the concrete media bridges. No real player or osascript is started.
"""
import subprocess

import pytest

from rtplay.bridge import make_bridge, stream_label
from rtplay.bridge import music
from rtplay.bridge.mpv import MpvBridge
from rtplay.bridge.music import MusicAppBridge, check_result
from rtplay.errors import BridgeCommandFailed, BridgeUnavailable, NotFound
from rtplay import player


def test_stream_label():
    assert stream_label("https://stream.radio-t.com") == "Radio-T: https://stream.radio-t.com"


@pytest.mark.parametrize(
    "output, exc",
    [
        ("err:noapp", BridgeUnavailable),
        ("err:notfound", NotFound),
        ("err:Music got an error", BridgeCommandFailed),
    ],
)
def test_check_result_errors(output, exc):
    with pytest.raises(exc):
        check_result(output)


def test_check_result_passthrough():
    assert check_result("12345") == "12345"
    assert check_result("") == ""


@pytest.fixture
def fake_osascript(monkeypatch):
    runs = []
    outputs = []

    def run(argv, input=None, capture_output=False, text=False):
        runs.append(input)
        stdout, rc = outputs.pop(0) if outputs else ("ok", 0)
        return subprocess.CompletedProcess(argv, rc, stdout=stdout, stderr="boom" if rc else "")

    monkeypatch.setattr(music.shutil, "which", lambda name: "/usr/bin/osascript")
    monkeypatch.setattr(music.subprocess, "run", run)
    return runs, outputs


def test_music_start_returns_track_id(fake_osascript):
    runs, outputs = fake_osascript
    outputs.append(("  4711\n", 0))

    stream_id = MusicAppBridge().start_stream('https://x.test/a"b.mp3', "Radio-T: x")

    assert stream_id == "4711"
    assert 'open location "https://x.test/a\\"b.mp3"' in runs[0]
    assert 'to "Radio-T: x"' in runs[0]


def test_music_start_without_track(fake_osascript):
    _, outputs = fake_osascript
    outputs.append(("", 0))

    assert MusicAppBridge().start_stream("https://x.test/a.mp3", "l") is None


def test_music_missing_app(fake_osascript):
    _, outputs = fake_osascript
    outputs.append(("err:noapp", 0))

    with pytest.raises(BridgeUnavailable):
        MusicAppBridge().start_stream("https://x.test/a.mp3", "l")


def test_music_script_exit_code(fake_osascript):
    _, outputs = fake_osascript
    outputs.append(("", 1))

    with pytest.raises(BridgeCommandFailed):
        MusicAppBridge().pause()


def test_music_stop_missing_track(fake_osascript):
    runs, outputs = fake_osascript
    outputs.append(("err:notfound", 0))

    with pytest.raises(NotFound):
        MusicAppBridge().stop("4711")
    assert "first track whose id is 4711" in runs[0]


def test_music_stop_without_id_only_stops(fake_osascript):
    runs, _ = fake_osascript

    MusicAppBridge().stop(None)

    assert "delete" not in runs[0]


def test_music_needs_osascript(monkeypatch):
    monkeypatch.setattr(music.shutil, "which", lambda name: None)

    with pytest.raises(BridgeUnavailable):
        MusicAppBridge().pause()


def test_make_bridge():
    assert isinstance(make_bridge("music"), MusicAppBridge)
    assert isinstance(make_bridge("mpv"), MpvBridge)
    with pytest.raises(ValueError):
        make_bridge("winamp")


def test_player_command(monkeypatch, tmp_path):
    monkeypatch.setattr(player.shutil, "which", lambda name: "/usr/bin/mpv")

    cmd = player.build_player_command("https://x.test/a.mp3", ipc_path=tmp_path / "rt-1.sock", title="Radio-T: x")

    assert cmd.argv[0] == "/usr/bin/mpv"
    assert f"--input-ipc-server={tmp_path / 'rt-1.sock'}" in cmd.argv
    assert "--force-media-title=Radio-T: x" in cmd.argv
    assert cmd.argv[-1] == "https://x.test/a.mp3"


def test_player_command_without_mpv(monkeypatch, tmp_path):
    monkeypatch.setattr(player.shutil, "which", lambda name: None)

    assert player.build_player_command("u", ipc_path=tmp_path / "s") is None


def test_mpv_start_without_player(monkeypatch, tmp_path):
    monkeypatch.setattr(player.shutil, "which", lambda name: None)

    with pytest.raises(BridgeUnavailable):
        MpvBridge(runtime_dir=tmp_path).start_stream("u", "l")


def test_mpv_stop_of_vanished_stream(tmp_path):
    with pytest.raises(NotFound):
        MpvBridge(runtime_dir=tmp_path).stop("rt-gone")


def test_mpv_stop_without_id_is_fine(tmp_path):
    MpvBridge(runtime_dir=tmp_path / "missing").stop(None)


def test_mpv_pause_with_nothing_running(tmp_path):
    with pytest.raises(BridgeCommandFailed):
        MpvBridge(runtime_dir=tmp_path).pause()


def test_mpv_play_of_vanished_stream(tmp_path):
    with pytest.raises(NotFound):
        MpvBridge(runtime_dir=tmp_path).play("rt-gone")


def test_mpv_commands_go_through_ipc(monkeypatch, tmp_path):
    sent = []

    def request(path, payload, timeout=0.5):
        sent.append((path.name, payload["command"]))
        return {"error": "success"}

    monkeypatch.setattr("rtplay.bridge.mpv.mpv_ipc_request", request)
    (tmp_path / "rt-a.sock").touch()
    (tmp_path / "rt-b.sock").touch()
    bridge = MpvBridge(runtime_dir=tmp_path)

    bridge.play("rt-a")
    bridge.pause()

    assert sent == [
        ("rt-a.sock", ["set_property", "pause", False]),
        ("rt-a.sock", ["set_property", "pause", True]),
        ("rt-b.sock", ["set_property", "pause", True]),
    ]


def test_mpv_error_reply(monkeypatch, tmp_path):
    monkeypatch.setattr("rtplay.bridge.mpv.mpv_ipc_request", lambda path, payload, timeout=0.5: {"error": "invalid"})

    with pytest.raises(BridgeCommandFailed):
        MpvBridge(runtime_dir=tmp_path).play("rt-a")


def test_mpv_silent_player_is_a_failure(monkeypatch, tmp_path):
    monkeypatch.setattr("rtplay.bridge.mpv.mpv_ipc_request", lambda path, payload, timeout=0.5: {})
    (tmp_path / "rt-a.sock").touch()
    bridge = MpvBridge(runtime_dir=tmp_path)

    with pytest.raises(BridgeCommandFailed):
        bridge.play("rt-a")
    with pytest.raises(BridgeCommandFailed):
        bridge.pause()

    # A player that exits on quit without answering is still stopped.
    bridge.stop("rt-a")
    assert not (tmp_path / "rt-a.sock").exists()
