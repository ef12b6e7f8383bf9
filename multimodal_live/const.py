"""Constants for the multimodal live client."""

DEFAULT_MODEL = "gemini-2.0-flash-live-001"

# Inline data with this mime prefix is routed to audio events
AUDIO_MIME_PREFIX = "audio/pcm"

MODALITY_TEXT = "text"
MODALITY_AUDIO = "audio"
MODALITY_IMAGE = "image"
MODALITIES = (MODALITY_TEXT, MODALITY_AUDIO, MODALITY_IMAGE)

# Streaming log categories
LOG_CLIENT_OPEN = "client.open"
LOG_CLIENT_CLOSE = "client.close"
LOG_CLIENT_SEND = "client.send"
LOG_CLIENT_REALTIME_INPUT = "client.realtimeInput"
LOG_CLIENT_TOOL_RESPONSE = "client.toolResponse"
LOG_SERVER_CLOSE = "server.close"
LOG_SERVER_ERROR = "server.error"
LOG_SERVER_TOOL_CALL = "server.toolCall"
LOG_SERVER_TOOL_CALL_CANCELLATION = "server.toolCallCancellation"
LOG_SERVER_INTERRUPTED = "server.interrupted"
LOG_SERVER_TURN_COMPLETE = "server.turnComplete"
LOG_SERVER_AUDIO = "server.audio"
LOG_SERVER_CONTENT = "server.content"
