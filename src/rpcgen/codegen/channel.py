# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Kotlin runtime for calling actions over a Phoenix channel.

The runtime keeps three state machines:

- the socket: closed → connecting → open, reconnecting with backoff when
  the connection drops unless the caller disconnected;
- each channel: closed → joining → joined or errored → leaving → closed;
- each pending push, keyed by a monotonically increasing ref and resolved
  exactly once by a reply, a timeout or a teardown, whichever comes first.
"""

from __future__ import annotations

from collections.abc import Sequence

from rpcgen.codegen.action_shape import ActionShape
from rpcgen.codegen.functions import render_channel_function

# ###############
# Public Interface
# ###############

CHANNEL_RUNTIME = """\
@Serializable
data class PhoenixMessage(
    val joinRef: String? = null,
    val ref: String? = null,
    val topic: String,
    val event: String,
    val payload: JsonElement = JsonObject(emptyMap())
) {
    fun toWire(): String = buildJsonArray {
        add(joinRef?.let { JsonPrimitive(it) } ?: JsonNull)
        add(ref?.let { JsonPrimitive(it) } ?: JsonNull)
        add(JsonPrimitive(topic))
        add(JsonPrimitive(event))
        add(payload)
    }.toString()

    companion object {
        fun fromWire(text: String): PhoenixMessage {
            val frame = rpcJson.parseToJsonElement(text).jsonArray
            return PhoenixMessage(
                joinRef = frame[0].jsonPrimitive.contentOrNull,
                ref = frame[1].jsonPrimitive.contentOrNull,
                topic = frame[2].jsonPrimitive.content,
                event = frame[3].jsonPrimitive.content,
                payload = frame[4]
            )
        }
    }
}

enum class SocketState { CLOSED, CONNECTING, OPEN }

enum class ChannelState { CLOSED, JOINING, JOINED, ERRORED, LEAVING }

enum class PushStatus { OK, ERROR, TIMEOUT, CLOSED }

data class PushReply(val status: PushStatus, val response: JsonElement?)

class Push(val ref: String) {
    private val reply = CompletableDeferred<PushReply>()

    // First resolution wins: later replies, timeouts and teardowns are ignored.
    fun resolve(status: PushStatus, response: JsonElement?): Boolean =
        reply.complete(PushReply(status, response))

    suspend fun await(timeoutMs: Long): PushReply {
        val result = withTimeoutOrNull(timeoutMs) { reply.await() }
        if (result != null) {
            return result
        }
        resolve(PushStatus.TIMEOUT, null)
        return reply.await()
    }
}

class PhoenixSocket(
    private val client: HttpClient,
    private val url: String,
    private val params: Map<String, String> = emptyMap(),
    private val heartbeatIntervalMs: Long = 30000L,
    private val reconnectBackoffMs: List<Long> = listOf(1000L, 2000L, 5000L, 10000L),
    private val scope: CoroutineScope = CoroutineScope(SupervisorJob() + Dispatchers.Default)
) {
    var state: SocketState = SocketState.CLOSED
        private set

    private var session: DefaultClientWebSocketSession? = null
    private var refCounter = 0L
    private val refMutex = Mutex()
    private val pending = mutableMapOf<String, Push>()
    private val pendingMutex = Mutex()
    private val channels = mutableListOf<PhoenixChannel>()
    private var heartbeatJob: Job? = null
    private var receiveJob: Job? = null
    private var reconnectAttempt = 0
    private var closedByUser = false

    suspend fun nextRef(): String = refMutex.withLock { (++refCounter).toString() }

    fun isConnected(): Boolean = state == SocketState.OPEN

    suspend fun connect() {
        if (state != SocketState.CLOSED) {
            return
        }
        closedByUser = false
        state = SocketState.CONNECTING
        try {
            val newSession = client.webSocketSession(buildUrl())
            session = newSession
            state = SocketState.OPEN
            reconnectAttempt = 0
            startHeartbeat()
            startReceiving(newSession)
            channels.filter { it.state == ChannelState.ERRORED }.forEach { scope.launch { it.rejoin() } }
        } catch (e: CancellationException) {
            throw e
        } catch (e: Exception) {
            state = SocketState.CLOSED
            scheduleReconnect()
        }
    }

    suspend fun disconnect() {
        closedByUser = true
        heartbeatJob?.cancel()
        receiveJob?.cancel()
        session?.close(CloseReason(CloseReason.Codes.NORMAL, "Client disconnect"))
        session = null
        state = SocketState.CLOSED
        failPending("Socket disconnected")
        channels.forEach { it.onSocketClosed() }
    }

    fun channel(topic: String, params: JsonObject = JsonObject(emptyMap())): PhoenixChannel {
        val channel = PhoenixChannel(this, topic, params)
        channels.add(channel)
        return channel
    }

    internal suspend fun send(message: PhoenixMessage, push: Push?) {
        val current = session
        if (state != SocketState.OPEN || current == null) {
            push?.resolve(PushStatus.CLOSED, JsonPrimitive("Socket is not connected"))
            return
        }
        if (push != null) {
            pendingMutex.withLock { pending[push.ref] = push }
        }
        try {
            current.send(Frame.Text(message.toWire()))
        } catch (e: CancellationException) {
            throw e
        } catch (e: Exception) {
            push?.let { removePending(it.ref)?.resolve(PushStatus.CLOSED, JsonPrimitive("Send failed")) }
        }
    }

    internal suspend fun removePending(ref: String): Push? = pendingMutex.withLock { pending.remove(ref) }

    private fun buildUrl(): String {
        val query = (params + ("vsn" to "2.0.0")).entries.joinToString("&") { (key, value) -> "$key=$value" }
        val separator = if (url.contains("?")) "&" else "?"
        return "$url$separator$query"
    }

    private fun startHeartbeat() {
        heartbeatJob?.cancel()
        heartbeatJob = scope.launch {
            while (isActive) {
                delay(heartbeatIntervalMs)
                send(PhoenixMessage(ref = nextRef(), topic = "phoenix", event = "heartbeat"), null)
            }
        }
    }

    private fun startReceiving(current: DefaultClientWebSocketSession) {
        receiveJob?.cancel()
        receiveJob = scope.launch {
            try {
                for (frame in current.incoming) {
                    if (frame is Frame.Text) {
                        handle(PhoenixMessage.fromWire(frame.readText()))
                    }
                }
            } catch (e: CancellationException) {
                throw e
            } catch (e: Exception) {
                // A malformed frame ends the session like a dropped connection.
            }
            onConnectionLost()
        }
    }

    private suspend fun handle(message: PhoenixMessage) {
        val ref = message.ref
        if (message.event == "phx_reply" && ref != null) {
            val push = removePending(ref) ?: return
            val reply = message.payload as? JsonObject
            val status = (reply?.get("status") as? JsonPrimitive)?.contentOrNull
            push.resolve(if (status == "ok") PushStatus.OK else PushStatus.ERROR, reply?.get("response"))
            return
        }
        channels.filter { it.topic == message.topic }.forEach { it.handle(message) }
    }

    private suspend fun onConnectionLost() {
        heartbeatJob?.cancel()
        session = null
        state = SocketState.CLOSED
        failPending("Connection lost")
        channels.forEach { it.onSocketClosed() }
        scheduleReconnect()
    }

    private suspend fun failPending(reason: String) {
        val dropped = pendingMutex.withLock { pending.values.toList().also { pending.clear() } }
        dropped.forEach { it.resolve(PushStatus.CLOSED, JsonPrimitive(reason)) }
    }

    private fun scheduleReconnect() {
        if (closedByUser) {
            return
        }
        val wait = reconnectBackoffMs[minOf(reconnectAttempt, reconnectBackoffMs.lastIndex)]
        reconnectAttempt += 1
        scope.launch {
            delay(wait)
            connect()
        }
    }
}

class PhoenixChannel internal constructor(
    private val socket: PhoenixSocket,
    val topic: String,
    private val params: JsonObject
) {
    var state: ChannelState = ChannelState.CLOSED
        private set

    private var joinRef: String? = null
    private val handlers = mutableMapOf<String, MutableList<(JsonElement) -> Unit>>()

    fun isJoined(): Boolean = state == ChannelState.JOINED

    fun on(event: String, callback: (JsonElement) -> Unit): PhoenixChannel {
        handlers.getOrPut(event) { mutableListOf() }.add(callback)
        return this
    }

    fun off(event: String): PhoenixChannel {
        handlers.remove(event)
        return this
    }

    suspend fun join(timeout: Long = 10000L): PushReply {
        state = ChannelState.JOINING
        val ref = socket.nextRef()
        joinRef = ref
        val message = PhoenixMessage(joinRef = ref, ref = ref, topic = topic, event = "phx_join", payload = params)
        val reply = request(message, timeout)
        state = if (reply.status == PushStatus.OK) ChannelState.JOINED else ChannelState.ERRORED
        return reply
    }

    suspend fun leave(timeout: Long = 10000L): PushReply {
        state = ChannelState.LEAVING
        val message = PhoenixMessage(joinRef = joinRef, ref = socket.nextRef(), topic = topic, event = "phx_leave")
        val reply = request(message, timeout)
        state = ChannelState.CLOSED
        return reply
    }

    suspend fun push(event: String, payload: JsonElement, timeout: Long = 10000L): PushReply {
        if (state != ChannelState.JOINED) {
            return PushReply(PushStatus.CLOSED, JsonPrimitive("Channel $topic is not joined"))
        }
        val ref = socket.nextRef()
        val message = PhoenixMessage(joinRef = joinRef, ref = ref, topic = topic, event = event, payload = payload)
        return request(message, timeout)
    }

    internal suspend fun rejoin() {
        if (state == ChannelState.ERRORED) {
            join()
        }
    }

    internal fun onSocketClosed() {
        if (state == ChannelState.JOINED || state == ChannelState.JOINING) {
            state = ChannelState.ERRORED
        }
    }

    internal fun handle(message: PhoenixMessage) {
        when (message.event) {
            "phx_error" -> state = ChannelState.ERRORED
            "phx_close" -> state = ChannelState.CLOSED
        }
        handlers[message.event]?.forEach { it(message.payload) }
    }

    private suspend fun request(message: PhoenixMessage, timeout: Long): PushReply {
        val push = Push(message.ref!!)
        socket.send(message, push)
        val reply = push.await(timeout)
        if (reply.status == PushStatus.TIMEOUT) {
            socket.removePending(push.ref)
        }
        return reply
    }
}

class AshRpcChannel(val channel: PhoenixChannel, private val event: String = "run") {
    val state: ChannelState
        get() = channel.state

    suspend fun join(timeout: Long = 10000L): PushReply = channel.join(timeout)

    suspend fun leave(timeout: Long = 10000L): PushReply = channel.leave(timeout)

    suspend fun run(payload: JsonObject, timeout: Long = 10000L): RpcResult {
        val reply = channel.push(event, payload, timeout)
        return when (reply.status) {
            PushStatus.TIMEOUT -> RpcResult.failure(AshRpcError.timeout(timeout))
            PushStatus.CLOSED -> RpcResult.failure(
                AshRpcError.connectionClosed((reply.response as? JsonPrimitive)?.contentOrNull ?: "Channel closed")
            )
            PushStatus.OK, PushStatus.ERROR -> decodeReply(reply.response)
        }
    }

    private fun decodeReply(response: JsonElement?): RpcResult {
        if (response == null || response is JsonNull) {
            return RpcResult.failure(AshRpcError.emptyResponse())
        }
        return try {
            rpcJson.decodeFromJsonElement<RpcResult>(response)
        } catch (e: SerializationException) {
            RpcResult.failure(AshRpcError.deserialization(e))
        } catch (e: IllegalArgumentException) {
            RpcResult.failure(AshRpcError.deserialization(e))
        }
    }
}"""


def render_channel_client(shapes: Sequence[ActionShape]) -> str:
    """Render the channel runtime followed by one channel function per action."""
    parts = [CHANNEL_RUNTIME]
    parts.extend(render_channel_function(shape) for shape in shapes)
    return "\n\n".join(parts)
