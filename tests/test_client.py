import base64

import pytest
from google.genai import types

from multimodal_live import (
    AlreadyConnectedError,
    AudioEvent,
    CloseEvent,
    ConfigError,
    ConnectError,
    ContentEvent,
    LiveConfig,
    LiveFunctionResponse,
    LiveGenerationConfig,
    LogEvent,
    MultimodalLiveClient,
    NotConnectedError,
    Open,
    OpenEvent,
    SetupCompleteEvent,
    TurnCompleteEvent,
)


@pytest.mark.asyncio
async def test_connect_opens_session(client, transport):
    config = LiveConfig(model="models/test-model")

    assert await client.connect(config) is True

    assert client.connected
    assert isinstance(client.state, Open)
    assert client.get_config() is config
    model, connect_config = transport.opened[0]
    assert model == "models/test-model"
    assert connect_config.response_modalities == [types.Modality.TEXT]


@pytest.mark.asyncio
async def test_connect_accepts_wire_mapping(client, transport):
    await client.connect(
        {"model": "models/test-model", "generationConfig": {"responseModalities": "audio"}}
    )

    _, connect_config = transport.opened[0]
    assert connect_config.response_modalities == [types.Modality.AUDIO]
    assert client.get_config().generation_config.response_modalities == "audio"


@pytest.mark.asyncio
async def test_connect_rejects_invalid_mapping(client, transport):
    with pytest.raises(ConfigError):
        await client.connect({"generationConfig": {}})

    assert transport.opened == []
    assert not client.connected


@pytest.mark.asyncio
async def test_on_open_logs_and_emits_open_then_setup_complete(client, transport, recorder):
    await client.connect(LiveConfig())

    await transport.callbacks.on_open()

    assert recorder.names() == ["OpenEvent", "SetupCompleteEvent"]
    assert recorder.log_types() == ["client.open"]
    assert isinstance(recorder.events[0], LogEvent)
    assert isinstance(recorder.events[1], OpenEvent)
    assert isinstance(recorder.events[2], SetupCompleteEvent)


@pytest.mark.asyncio
async def test_connect_failure_logs_and_raises(client, transport, recorder):
    transport.error = OSError("handshake refused")

    with pytest.raises(ConnectError) as excinfo:
        await client.connect(LiveConfig())

    assert str(excinfo.value) == "Could not connect: handshake refused"
    assert isinstance(excinfo.value.__cause__, OSError)
    assert not client.connected
    log = recorder.of_type(LogEvent)[0].log
    assert log.type == "server.error"
    assert log.message == "Connection error: handshake refused"


@pytest.mark.asyncio
async def test_connect_twice_is_rejected(client, transport):
    await client.connect(LiveConfig())

    with pytest.raises(AlreadyConnectedError):
        await client.connect(LiveConfig())

    assert len(transport.opened) == 1


@pytest.mark.asyncio
async def test_disconnect_twice(client, transport, recorder):
    await client.connect(LiveConfig())
    handle = transport.handle

    assert await client.disconnect() is True
    assert await client.disconnect() is False

    assert handle.closed
    assert not client.connected
    assert len(recorder.of_type(CloseEvent)) == 1
    assert recorder.log_types() == ["server.close", "client.close"]


@pytest.mark.asyncio
async def test_disconnect_without_session_returns_false(client, recorder):
    assert await client.disconnect() is False
    assert recorder.events == []


@pytest.mark.asyncio
async def test_reconnect_after_disconnect(client, transport):
    await client.connect(LiveConfig())
    await client.disconnect()

    assert await client.connect(LiveConfig()) is True

    assert len(transport.handles) == 2
    assert client.state.handle is transport.handles[1]


@pytest.mark.asyncio
async def test_server_close_clears_session(client, transport, recorder):
    await client.connect(LiveConfig())

    await transport.callbacks.on_close("going away")

    assert not client.connected
    assert recorder.of_type(CloseEvent) == [CloseEvent(reason="going away")]
    log = recorder.of_type(LogEvent)[0].log
    assert log.type == "server.close"
    assert log.message == "disconnected with reason: going away"
    with pytest.raises(NotConnectedError):
        await client.send("hello")


@pytest.mark.asyncio
async def test_stale_close_does_not_drop_new_session(client, transport):
    await client.connect(LiveConfig())
    old_callbacks = transport.callbacks
    await client.disconnect()
    await client.connect(LiveConfig())

    await old_callbacks.on_close(None)

    assert client.connected


@pytest.mark.asyncio
async def test_error_callback_logs_without_closing(client, transport, recorder):
    await client.connect(LiveConfig())

    await transport.callbacks.on_error(RuntimeError("quota exceeded"))

    assert client.connected
    assert recorder.names() == []
    log = recorder.of_type(LogEvent)[0].log
    assert (log.type, log.message) == ("server.error", "Error: quota exceeded")


@pytest.mark.asyncio
async def test_message_callback_emits_classified_events(client, transport, recorder):
    await client.connect(LiveConfig())
    message = types.LiveServerMessage(
        server_content=types.LiveServerContent(
            turn_complete=True,
            model_turn=types.Content(
                role="model",
                parts=[
                    types.Part(inline_data=types.Blob(mime_type="audio/pcm;rate=24000", data=b"\x01\x02")),
                    types.Part(text="hi"),
                ],
            ),
        )
    )

    await transport.callbacks.on_message(message)

    assert recorder.names() == ["TurnCompleteEvent", "AudioEvent", "ContentEvent"]
    assert recorder.of_type(AudioEvent)[0].data == b"\x01\x02"
    assert recorder.of_type(ContentEvent)[0].model_turn.parts[0].text == "hi"


@pytest.mark.asyncio
async def test_typed_handlers_receive_only_their_events(client, transport):
    turn_complete = []
    client.on(TurnCompleteEvent, turn_complete.append)
    await client.connect(LiveConfig())

    await transport.callbacks.on_message({"serverContent": {"turnComplete": True}})
    await transport.callbacks.on_message({"serverContent": {"interrupted": True}})

    assert turn_complete == [TurnCompleteEvent()]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "call",
    [
        lambda c: c.send("hello"),
        lambda c: c.send_realtime_input({"mimeType": "audio/pcm", "data": b"\x00"}),
        lambda c: c.send_tool_response([LiveFunctionResponse(id="1", response={})]),
        lambda c: c.send_direct({"clientContent": {"turns": []}}),
    ],
)
async def test_send_family_requires_connection(client, transport, recorder, call):
    with pytest.raises(NotConnectedError, match="Session is not connected"):
        await call(client)

    assert transport.handles == []
    assert recorder.events == []


@pytest.mark.asyncio
async def test_send_after_disconnect_fails(client, transport):
    await client.connect(LiveConfig())
    handle = transport.handle
    await client.disconnect()

    with pytest.raises(NotConnectedError):
        await client.send("late")

    assert [name for name, _ in handle.calls] == ["close"]


@pytest.mark.asyncio
async def test_send_wraps_single_part_as_user_turn(client, transport, recorder):
    await client.connect(LiveConfig())

    await client.send(types.Part(text="hello"))

    name, kwargs = transport.handle.calls[0]
    assert name == "send_client_content"
    assert kwargs["turn_complete"] is True
    (content,) = kwargs["turns"]
    assert content.role == "user"
    assert [p.text for p in content.parts] == ["hello"]
    log = recorder.of_type(LogEvent)[-1].log
    assert log.type == "client.send"
    assert log.message["turnComplete"] is True


@pytest.mark.asyncio
async def test_send_part_list_without_turn_complete(client, transport):
    await client.connect(LiveConfig())

    await client.send([{"text": "a"}, "b"], turn_complete=False)

    _, kwargs = transport.handle.calls[0]
    assert kwargs["turn_complete"] is False
    assert [p.text for p in kwargs["turns"][0].parts] == ["a", "b"]


@pytest.mark.asyncio
async def test_send_realtime_input_logs_media_category(client, transport, recorder):
    await client.connect(LiveConfig())
    chunk = types.Blob(mime_type="video/jpeg", data=b"\xff\xd8")

    await client.send_realtime_input(chunk)

    name, kwargs = transport.handle.calls[0]
    assert name == "send_realtime_input"
    assert kwargs["media"] is chunk
    log = recorder.of_type(LogEvent)[-1].log
    assert (log.type, log.message) == ("client.realtimeInput", "video")


@pytest.mark.asyncio
async def test_send_realtime_input_decodes_base64_mapping(client, transport):
    await client.connect(LiveConfig())
    pcm = b"\x01\x00\x02\x00"

    await client.send_realtime_input(
        {"mimeType": "audio/pcm;rate=16000", "data": base64.b64encode(pcm).decode()}
    )

    media = transport.handle.calls[0][1]["media"]
    assert media.mime_type == "audio/pcm;rate=16000"
    assert media.data == pcm


@pytest.mark.asyncio
async def test_send_tool_response_preserves_order(client, transport, recorder):
    await client.connect(LiveConfig())

    await client.send_tool_response(
        {
            "functionResponses": [
                LiveFunctionResponse(id="call-1", response={"result": "sunny"}),
                {"id": "call-2", "response": {"result": 42}},
            ]
        }
    )

    name, kwargs = transport.handle.calls[0]
    assert name == "send_tool_response"
    responses = kwargs["function_responses"]
    assert [(r.id, r.response) for r in responses] == [
        ("call-1", {"result": "sunny"}),
        ("call-2", {"result": 42}),
    ]
    log = recorder.of_type(LogEvent)[-1].log
    assert log.type == "client.toolResponse"
    assert log.message["toolResponse"]["functionResponses"] == responses


@pytest.mark.asyncio
async def test_send_propagates_session_failure(client, transport, recorder):
    await client.connect(LiveConfig())
    transport.handle.fail_with = ConnectionError("socket closed")

    with pytest.raises(ConnectionError):
        await client.send("hello")

    assert recorder.of_type(LogEvent) == []


@pytest.mark.asyncio
async def test_send_direct_routes_requests(client, transport):
    await client.connect(LiveConfig())
    chunk = base64.b64encode(b"\x00\x01").decode()

    await client.send_direct(
        {"clientContent": {"turns": [{"role": "user", "parts": [{"text": "hi"}]}], "turnComplete": False}}
    )
    await client.send_direct(
        {"realtimeInput": {"mediaChunks": [{"mimeType": "audio/pcm", "data": chunk}] * 2}}
    )
    await client.send_direct(
        {"toolResponse": {"functionResponses": [{"id": "c1", "response": {"ok": True}}]}}
    )
    await client.send_direct({"setup": {"model": "ignored"}})
    await client.send_direct({"somethingElse": {}})

    names = [name for name, _ in transport.handle.calls]
    assert names == [
        "send_client_content",
        "send_realtime_input",
        "send_realtime_input",
        "send_tool_response",
    ]
    content_kwargs = transport.handle.calls[0][1]
    assert content_kwargs["turn_complete"] is False
    assert content_kwargs["turns"][0].parts[0].text == "hi"
    assert transport.handle.calls[1][1]["media"].data == b"\x00\x01"


@pytest.mark.asyncio
async def test_send_direct_validates_payload(client):
    await client.connect(LiveConfig())

    with pytest.raises(ConfigError):
        await client.send_direct({"toolResponse": {"functionResponses": [{"id": "c1"}]}})


@pytest.mark.asyncio
async def test_handler_errors_do_not_stop_delivery(client, transport):
    received = []

    def broken(event):
        raise ValueError("boom")

    client.on(TurnCompleteEvent, broken)
    client.on(TurnCompleteEvent, received.append)
    await client.connect(LiveConfig())

    await transport.callbacks.on_message({"serverContent": {"turnComplete": True}})

    assert received == [TurnCompleteEvent()]


@pytest.mark.asyncio
async def test_async_handlers_are_awaited(client, transport):
    received = []

    async def handler(event):
        received.append(event)

    client.on(AudioEvent, handler)
    await client.connect(LiveConfig(generation_config=LiveGenerationConfig(response_modalities="audio")))

    await transport.callbacks.on_message(
        {"serverContent": {"modelTurn": {"parts": [{"inlineData": {"mimeType": "audio/pcm", "data": "AAE="}}]}}}
    )

    assert received == [AudioEvent(b"\x00\x01")]


def test_default_client_uses_genai_transport():
    from multimodal_live.transport import GenaiLiveTransport

    client = MultimodalLiveClient(api_key="test-key")

    assert isinstance(client._transport, GenaiLiveTransport)
    assert not client.connected
