import asyncio
import json
import pathlib
import sys
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from services.session_client.client import SessionClient  # noqa: E402
from utils.settings import ClientSettings  # noqa: E402


class FakeTrack:
    def __init__(self) -> None:
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class FakeChannel:
    def __init__(self, label: str) -> None:
        self.label = label
        self.ready_state = "connecting"
        self.sent: List[Dict[str, Any]] = []
        self._handlers: Dict[str, List[Callable[..., Any]]] = defaultdict(list)

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        self._handlers[event].append(callback)

    def emit(self, event: str, *args: Any) -> None:
        for callback in list(self._handlers[event]):
            callback(*args)

    def open(self) -> None:
        self.ready_state = "open"
        self.emit("open")

    def receive(self, payload: Any) -> None:
        self.emit("message", payload if isinstance(payload, str) else json.dumps(payload))

    def send(self, data: str) -> None:
        if self.ready_state != "open":
            raise RuntimeError("channel is not open")
        self.sent.append(json.loads(data))

    def close(self) -> None:
        if self.ready_state == "closed":
            return
        self.ready_state = "closed"
        self.emit("close")


class FakePeer:
    def __init__(self) -> None:
        self.tracks: List[FakeTrack] = []
        self.channels: List[FakeChannel] = []
        self.track_callback: Optional[Callable[[Any], None]] = None
        self.local_sdp: Optional[str] = None
        self.remote_sdp: Optional[str] = None
        self.closed = False

    def on_track(self, callback: Callable[[Any], None]) -> None:
        self.track_callback = callback

    def add_track(self, track: FakeTrack) -> None:
        self.tracks.append(track)

    def outbound_tracks(self) -> List[FakeTrack]:
        return list(self.tracks)

    def create_data_channel(self, label: str) -> FakeChannel:
        channel = FakeChannel(label)
        self.channels.append(channel)
        return channel

    async def create_offer(self) -> str:
        return "v=0 offer"

    async def set_local_description(self, sdp: str) -> None:
        self.local_sdp = sdp

    async def set_remote_description(self, sdp: str) -> None:
        self.remote_sdp = sdp

    def close(self) -> None:
        self.closed = True

    @property
    def channel(self) -> FakeChannel:
        return self.channels[-1]


class PeerFactory:
    def __init__(self) -> None:
        self.peers: List[FakePeer] = []

    def __call__(self) -> FakePeer:
        peer = FakePeer()
        self.peers.append(peer)
        return peer


class FakeMedia:
    def __init__(self) -> None:
        self.error: Optional[BaseException] = None
        self.tracks: List[FakeTrack] = []

    async def open_microphone(self) -> FakeTrack:
        if self.error is not None:
            raise self.error
        track = FakeTrack()
        self.tracks.append(track)
        return track


class FakeAudioSink:
    def __init__(self) -> None:
        self.stream: Any = None
        self.detached = 0

    def attach(self, stream: Any) -> None:
        self.stream = stream

    def detach(self) -> None:
        self.stream = None
        self.detached += 1


class FakeRelay:
    """Stands in for RelayClient; gates let a test hold a call open."""

    def __init__(self) -> None:
        self.token: Dict[str, Any] = {"id": "sess_1", "client_secret": {"value": "ek_123"}}
        self.reply = "Hi there!"
        self.explanation = json.dumps({"english": "Hi there!", "japanese": "こんにちは", "grammar": ""})
        self.translation = "やあ！"
        self.chat_error: Optional[BaseException] = None
        self.explain_error: Optional[BaseException] = None
        self.token_gate: Optional[asyncio.Event] = None
        self.chat_gate: Optional[asyncio.Event] = None
        self.explain_gate: Optional[asyncio.Event] = None
        self.chat_calls: List[str] = []
        self.translate_calls: List[str] = []
        self.explain_calls: List[tuple] = []
        self.closed = False

    async def fetch_token(self) -> Dict[str, Any]:
        if self.token_gate is not None:
            await self.token_gate.wait()
        return self.token

    async def chat(self, user_message: str) -> str:
        self.chat_calls.append(user_message)
        if self.chat_gate is not None:
            await self.chat_gate.wait()
        if self.chat_error is not None:
            raise self.chat_error
        return self.reply

    async def translate(self, text: str) -> str:
        self.translate_calls.append(text)
        return self.translation

    async def explain(self, user_text: str, ai_text: str) -> str:
        self.explain_calls.append((user_text, ai_text))
        if self.explain_gate is not None:
            await self.explain_gate.wait()
        if self.explain_error is not None:
            raise self.explain_error
        return self.explanation

    async def aclose(self) -> None:
        self.closed = True


class FakeSignaling:
    def __init__(self) -> None:
        self.answer = "v=0 answer"
        self.error: Optional[BaseException] = None
        self.gate: Optional[asyncio.Event] = None
        self.entered = asyncio.Event()
        self.calls: List[tuple] = []

    async def exchange(self, offer_sdp: str, key: str) -> str:
        self.calls.append((offer_sdp, key))
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.answer

    async def aclose(self) -> None:
        pass


class RecordingNotifier:
    def __init__(self) -> None:
        self.successes: List[str] = []
        self.infos: List[str] = []
        self.errors: List[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def info(self, message: str) -> None:
        self.infos.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


class FakeRecognizer:
    def __init__(self) -> None:
        self.lang = ""
        self.continuous = True
        self.interim_results = True
        self.callbacks: Optional[tuple] = None
        self.stopped = False

    def start(self, on_result, on_error, on_end) -> None:
        self.callbacks = (on_result, on_error, on_end)

    def stop(self) -> None:
        self.stopped = True


class FakeSynthesizer:
    def __init__(self) -> None:
        self.spoken: List[tuple] = []

    def speak(self, text: str, *, lang: str, rate: float) -> None:
        self.spoken.append((text, lang, rate))


@pytest.fixture
def client_settings() -> ClientSettings:
    return ClientSettings(
        _env_file=None,
        relay_base_url="http://relay.test",
        realtime_base_url="https://realtime.test/v1/realtimertc",
        realtime_model="gpt-4o-realtime-preview",
        translation_enabled=True,
        guard_realtime_send=False,
    )


@pytest.fixture
def relay() -> FakeRelay:
    return FakeRelay()


@pytest.fixture
def signaling() -> FakeSignaling:
    return FakeSignaling()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def media() -> FakeMedia:
    return FakeMedia()


@pytest.fixture
def peer_factory() -> PeerFactory:
    return PeerFactory()


@pytest.fixture
def audio_sink() -> FakeAudioSink:
    return FakeAudioSink()


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def make_session_client(
    relay, signaling, notifier, media, peer_factory, audio_sink, recognizer, synthesizer
) -> Callable[..., SessionClient]:
    def _make(settings: ClientSettings, **overrides: Any) -> SessionClient:
        kwargs: Dict[str, Any] = {
            "peer_factory": peer_factory,
            "media": media,
            "relay": relay,
            "signaling": signaling,
            "audio_sink": audio_sink,
            "recognizer_factory": lambda: recognizer,
            "synthesizer": synthesizer,
            "notifier": notifier,
        }
        kwargs.update(overrides)
        return SessionClient(settings, **kwargs)

    return _make


@pytest.fixture
def session_client(make_session_client, client_settings) -> SessionClient:
    return make_session_client(client_settings)
