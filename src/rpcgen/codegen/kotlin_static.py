# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Kotlin code shared by every generated client: imports, error and result types, HTTP helpers."""

from __future__ import annotations

from rpcgen.codegen.validation_schemas import VALIDATION_IMPORT
from rpcgen.config.options import DatetimeLibrary, GeneratorConfig

# ###############
# Public Interface
# ###############


def render_header(package_name: str) -> str:
    """Render the generated-file banner and package declaration."""
    return f"// Generated by rpcgen - Do not edit manually\n\npackage {package_name}"


def render_imports(config: GeneratorConfig) -> str:
    """Render the import block for the enabled features."""
    lines = list(_BASE_IMPORTS)
    if config.datetime_library is DatetimeLibrary.KOTLINX_DATETIME:
        lines.insert(2, "import kotlinx.datetime.*")
    else:
        lines.insert(2, "import java.time.*")
    if config.generate_channel_client:
        lines.extend(_CHANNEL_IMPORTS)
    if config.generate_validation_annotations:
        lines.append(VALIDATION_IMPORT)
    return "\n".join(lines)


TYPE_ALIASES = """\
typealias UUID = String
typealias Decimal = String"""

ERROR_TYPES = """\
@Serializable
data class AshRpcError(
    val type: String? = null,
    val message: String? = null,
    @SerialName("short_message")
    val shortMessage: String? = null,
    val vars: Map<String, JsonElement> = emptyMap(),
    val fields: List<String> = emptyList(),
    val path: List<JsonElement> = emptyList(),
    val details: JsonElement? = null
) {
    companion object {
        const val NETWORK_ERROR = "network_error"
        const val DESERIALIZATION_ERROR = "deserialization_error"
        const val TIMEOUT = "timeout"
        const val EMPTY_RESPONSE = "empty_response"
        const val CONNECTION_CLOSED = "connection_closed"

        fun network(cause: Throwable) =
            AshRpcError(type = NETWORK_ERROR, message = cause.message ?: "Network request failed")

        fun deserialization(cause: Throwable) =
            AshRpcError(type = DESERIALIZATION_ERROR, message = cause.message ?: "Malformed server response")

        fun timeout(timeoutMs: Long) =
            AshRpcError(type = TIMEOUT, message = "No reply within ${timeoutMs}ms")

        fun emptyResponse() =
            AshRpcError(type = EMPTY_RESPONSE, message = "Server returned an empty response")

        fun connectionClosed(reason: String) =
            AshRpcError(type = CONNECTION_CLOSED, message = reason)
    }
}"""

HTTP_CLIENT = """\
val rpcJson = Json {
    ignoreUnknownKeys = true
    isLenient = true
    explicitNulls = false
}

fun createHttpClient(): HttpClient {
    return HttpClient {
        install(ContentNegotiation) {
            json(rpcJson)
        }
    }
}"""

RESULT_WRAPPER = """\
@Serializable
data class RpcResult(
    val success: Boolean,
    val data: JsonElement? = null,
    val errors: List<AshRpcError>? = null,
    val metadata: JsonElement? = null
) {
    fun isSuccess(): Boolean = success
    fun isError(): Boolean = !success

    companion object {
        fun failure(error: AshRpcError) = RpcResult(success = false, errors = listOf(error))
    }
}

fun anyToJsonElement(value: Any?): JsonElement = when (value) {
    null -> JsonNull
    is JsonElement -> value
    is String -> JsonPrimitive(value)
    is Number -> JsonPrimitive(value)
    is Boolean -> JsonPrimitive(value)
    is Enum<*> -> JsonPrimitive(value.name)
    is Map<*, *> -> JsonObject(value.entries.associate { (key, item) -> key.toString() to anyToJsonElement(item) })
    is Iterable<*> -> JsonArray(value.map { anyToJsonElement(it) })
    is Array<*> -> JsonArray(value.map { anyToJsonElement(it) })
    else -> JsonPrimitive(value.toString())
}

suspend fun executeRpc(
    client: HttpClient,
    endpoint: String,
    payload: JsonObject,
    headers: Map<String, String> = emptyMap()
): RpcResult {
    val text = try {
        client.post(endpoint) {
            contentType(ContentType.Application.Json)
            headers.forEach { (key, value) -> header(key, value) }
            setBody(payload.toString())
        }.bodyAsText()
    } catch (e: CancellationException) {
        throw e
    } catch (e: Exception) {
        return RpcResult.failure(AshRpcError.network(e))
    }
    if (text.isBlank()) {
        return RpcResult.failure(AshRpcError.emptyResponse())
    }
    return try {
        rpcJson.decodeFromString<RpcResult>(text)
    } catch (e: SerializationException) {
        RpcResult.failure(AshRpcError.deserialization(e))
    } catch (e: IllegalArgumentException) {
        RpcResult.failure(AshRpcError.deserialization(e))
    }
}"""

VALIDATION_TYPES = """\
sealed class ValidationResult {
    abstract val valid: Boolean

    object Valid : ValidationResult() {
        override val valid: Boolean = true
    }

    data class Invalid(
        val errors: List<AshRpcError>
    ) : ValidationResult() {
        override val valid: Boolean = false
    }
}"""


# ################
# Implementation
# ################

_BASE_IMPORTS = (
    "import kotlinx.serialization.*",
    "import kotlinx.serialization.json.*",
    "import io.ktor.client.*",
    "import io.ktor.client.call.*",
    "import io.ktor.client.request.*",
    "import io.ktor.client.statement.*",
    "import io.ktor.client.plugins.contentnegotiation.*",
    "import io.ktor.serialization.kotlinx.json.*",
    "import io.ktor.http.*",
    "import kotlinx.coroutines.CancellationException",
)

_CHANNEL_IMPORTS = (
    "import io.ktor.client.plugins.websocket.*",
    "import io.ktor.websocket.*",
    "import kotlinx.coroutines.*",
    "import kotlinx.coroutines.sync.Mutex",
    "import kotlinx.coroutines.sync.withLock",
)
