import subprocess
from types import SimpleNamespace

from smartbot import speech
from smartbot.speech import CommandSynthesizer, SpeechSynthesizer


def test_detect_returns_none_without_commands(monkeypatch):
    monkeypatch.setattr(speech.shutil, "which", lambda name: None)

    assert CommandSynthesizer.detect() is None


def test_detect_picks_first_available(monkeypatch):
    monkeypatch.setattr(
        speech.shutil, "which", lambda name: f"/usr/bin/{name}" if name == "espeak" else None
    )

    synthesizer = CommandSynthesizer.detect()

    assert synthesizer.command == "/usr/bin/espeak"
    assert isinstance(synthesizer, SpeechSynthesizer)


def test_speak_runs_command(monkeypatch):
    calls = []

    def fake_run(args, **kwargs):
        calls.append(args)
        return SimpleNamespace(returncode=0, stderr="")

    monkeypatch.setattr(speech.subprocess, "run", fake_run)

    assert CommandSynthesizer("say").speak("hello") is True
    assert calls == [["say", "hello"]]


def test_speak_failures_return_false(monkeypatch):
    monkeypatch.setattr(
        speech.subprocess, "run", lambda args, **kwargs: SimpleNamespace(returncode=1, stderr="boom")
    )
    assert CommandSynthesizer("say").speak("hello") is False

    def timeout(args, **kwargs):
        raise subprocess.TimeoutExpired(args, 1)

    monkeypatch.setattr(speech.subprocess, "run", timeout)
    assert CommandSynthesizer("say").speak("hello") is False

    def missing(args, **kwargs):
        raise FileNotFoundError("say")

    monkeypatch.setattr(speech.subprocess, "run", missing)
    assert CommandSynthesizer("say").speak("hello") is False
