import asyncio

import pytest
from pydantic import BaseModel

from fake_service import start_listening
from signalr import (
    Context,
    DispatchError,
    FunctionHandler,
    Handler,
    HandshakeError,
    NotifiedHandler,
    ProtocolError,
    ServerCloseError,
    TransportError,
    new_invocation_message,
)
from signalr.core import ConnectionState, HubConnection
from signalr.protocol import encode_msg


class Greeting(BaseModel):
    sender: str
    text: str


class ChatHandler(Handler):
    def __init__(self, stop_after=1):
        self.received = []
        self.started = 0
        self.stop_after = stop_after

    def _record(self, ctx, item):
        self.received.append(item)
        if len(self.received) >= self.stop_after:
            ctx.cancel()

    async def default(self, ctx, target, args):
        self._record(ctx, (target, args))

    async def greet(self, ctx, greeting: Greeting):
        self._record(ctx, ("greet", greeting))

    async def on_start(self):
        self.started += 1


@pytest.mark.asyncio
async def test_default_handler_receives_invocation(make_client, hub_service):
    hub_service.after_handshake = [encode_msg({"type": 1, "target": "foo", "arguments": []})]
    client = make_client()
    handler = ChatHandler()

    await asyncio.wait_for(client.listen(handler, Context()), 5)

    assert handler.received == [("foo", [])]
    assert handler.started == 1


@pytest.mark.asyncio
async def test_loop_continues_until_context_cancelled(make_client, hub_service):
    hub_service.after_handshake = [
        encode_msg({"type": 6}),
        encode_msg({"type": 1, "target": "first", "arguments": [1]}),
        encode_msg({"type": 42, "target": "ignored"}),
        encode_msg({"type": 1, "target": "second", "arguments": ["a", {"b": 2}]}),
    ]
    handler = ChatHandler(stop_after=2)

    await asyncio.wait_for(make_client().listen(handler, Context()), 5)

    assert handler.received == [("first", [1]), ("second", ["a", {"b": 2}])]


@pytest.mark.asyncio
async def test_handshake_and_websocket_auth(make_client, hub_service):
    hub_service.after_handshake = [encode_msg({"type": 1, "target": "foo", "arguments": []})]
    client = make_client(name="user-1")

    await asyncio.wait_for(client.listen(ChatHandler(), Context()), 5)

    request = hub_service.ws_requests[0]
    assert request.claims["nameid"] == "user-1"
    assert request.claims["aud"] == client.session.audience_uri()
    assert "id=conn-0001" in request.url


@pytest.mark.asyncio
async def test_typed_method_via_broadcast(make_client, hub_service):
    listener = make_client(name="listener")
    sender = make_client(name="sender")
    handler = ChatHandler()
    ctx = Context()

    task = await start_listening(listener, handler, ctx, hub_service)
    await sender.broadcast_all(new_invocation_message("greet", Greeting(sender="sender", text="hi")))
    await asyncio.wait_for(task, 5)

    assert handler.received == [("greet", Greeting(sender="sender", text="hi"))]


@pytest.mark.asyncio
async def test_send_to_user_and_group(make_client, hub_service):
    listener = make_client(name="listener")
    sender = make_client(name="sender")
    handler = ChatHandler(stop_after=2)

    task = await start_listening(listener, handler, Context(), hub_service)
    await sender.send_to_user(new_invocation_message("direct", 1), "someone-else")
    await sender.send_to_user(new_invocation_message("direct", 2), "listener")
    await sender.add_user_to_group("room", "listener")
    await sender.broadcast_group(new_invocation_message("room", 3), "room")
    await asyncio.wait_for(task, 5)

    assert handler.received == [("direct", [2]), ("room", [3])]


@pytest.mark.asyncio
async def test_close_with_error(make_client, hub_service):
    hub_service.after_handshake = [encode_msg({"type": 7, "error": "bye"})]
    connection = HubConnection(make_client().session, read_timeout=5)

    with pytest.raises(ServerCloseError) as excinfo:
        await asyncio.wait_for(connection.listen(ChatHandler(), Context()), 5)

    assert str(excinfo.value) == "bye"
    assert connection.state == ConnectionState.FAILED


@pytest.mark.asyncio
async def test_clean_close(make_client, hub_service):
    hub_service.after_handshake = [
        encode_msg({"type": 7}),
        encode_msg({"type": 1, "target": "late", "arguments": []}),
    ]
    connection = HubConnection(make_client().session, read_timeout=5)
    handler = ChatHandler()

    assert await asyncio.wait_for(connection.listen(handler, Context()), 5) is None
    assert connection.state == ConnectionState.CLOSED
    assert handler.received == []


@pytest.mark.asyncio
async def test_unsupported_message_type(make_client, hub_service):
    hub_service.after_handshake = [
        encode_msg({"type": 6}),
        encode_msg({"type": 3, "invocationId": "1"}),
        encode_msg({"type": 1, "target": "late", "arguments": []}),
    ]
    handler = ChatHandler()

    with pytest.raises(ProtocolError, match="unhandled InvocationMessage type: 3"):
        await asyncio.wait_for(make_client().listen(handler, Context()), 5)
    assert handler.received == []


@pytest.mark.asyncio
async def test_envelope_without_type_is_skipped(make_client, hub_service):
    hub_service.after_handshake = [
        encode_msg({"target": "untyped", "arguments": []}),
        encode_msg({"type": 0, "target": "zero", "arguments": []}),
        encode_msg({"type": 1, "target": "foo", "arguments": []}),
    ]
    handler = ChatHandler()

    await asyncio.wait_for(make_client().listen(handler, Context()), 5)

    assert handler.received == [("foo", [])]


@pytest.mark.asyncio
async def test_cancel_from_handler_stops_before_queued_frames(make_client, hub_service):
    hub_service.after_handshake = [
        encode_msg({"type": 1, "target": "first", "arguments": []}),
        encode_msg({"type": 1, "target": "second", "arguments": []}),
        encode_msg({"type": 1, "target": "third", "arguments": []}),
    ]
    handler = ChatHandler(stop_after=1)

    assert await asyncio.wait_for(make_client().listen(handler, Context()), 5) is None
    assert handler.received == [("first", [])]


@pytest.mark.asyncio
async def test_cancel_during_handshake(make_client, hub_service):
    hub_service.handshake_delay = 1.0
    handler = ChatHandler()
    client = make_client(config={"read_timeout": 0.5})

    assert await asyncio.wait_for(client.listen(handler, Context(timeout=0.2)), 5) is None
    assert handler.started == 0


@pytest.mark.asyncio
async def test_undecodable_frame(make_client, hub_service):
    hub_service.after_handshake = ["not json\x1e"]

    with pytest.raises(ProtocolError):
        await asyncio.wait_for(make_client().listen(ChatHandler(), Context()), 5)


@pytest.mark.asyncio
async def test_handshake_rejected(make_client, hub_service):
    hub_service.handshake_error = "protocol not supported"
    handler = ChatHandler()

    with pytest.raises(HandshakeError, match="protocol not supported"):
        await asyncio.wait_for(make_client().listen(handler, Context()), 5)
    assert handler.started == 0


@pytest.mark.asyncio
async def test_read_timeout(make_client, hub_service):
    client = make_client(config={"read_timeout": 0.2})

    with pytest.raises(TransportError):
        await asyncio.wait_for(client.listen(ChatHandler(), Context()), 5)


@pytest.mark.asyncio
async def test_cancelled_context_skips_on_start(make_client, hub_service):
    handler = ChatHandler()
    ctx = Context()
    ctx.cancel()

    assert await asyncio.wait_for(make_client().listen(handler, ctx), 5) is None
    assert handler.started == 0
    assert handler.received == []


@pytest.mark.asyncio
async def test_context_timeout_stops_listening(make_client, hub_service):
    handler = ChatHandler()

    assert await asyncio.wait_for(make_client().listen(handler, Context(timeout=0.3)), 5) is None
    assert handler.started == 1


@pytest.mark.asyncio
async def test_handler_error_stops_listening(make_client, hub_service):
    hub_service.after_handshake = [encode_msg({"type": 1, "target": "foo", "arguments": []})]

    def refuse(ctx, target, args):
        return RuntimeError(f"cannot handle {target}")

    with pytest.raises(DispatchError, match="cannot handle foo"):
        await asyncio.wait_for(make_client().listen(FunctionHandler(refuse), Context()), 5)


@pytest.mark.asyncio
async def test_notified_handler_on_start(make_client, hub_service):
    client = make_client(name="listener")
    sender = make_client(name="sender")
    base = ChatHandler()
    ctx = Context()

    async def announce():
        await sender.send_to_user(new_invocation_message("ready"), "listener")

    task = await start_listening(client, NotifiedHandler(base, announce), ctx, hub_service)
    await asyncio.wait_for(task, 5)

    assert base.received == [("ready", [])]
    assert base.started == 0
