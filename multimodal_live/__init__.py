"""Session client for the Gemini Live multimodal API.

Provides:
- MultimodalLiveClient: connect/disconnect and outbound commands
- typed events for audio, content, tool calls and session lifecycle
- the transport contract and its google-genai implementation
"""

from .client import Disconnected, MultimodalLiveClient, Open, SessionState
from .events import (
    AudioEvent,
    CloseEvent,
    ContentEvent,
    InterruptedEvent,
    LiveEvent,
    LogEvent,
    OpenEvent,
    SetupCompleteEvent,
    ToolCallCancellationEvent,
    ToolCallEvent,
    TurnCompleteEvent,
)
from .exceptions import (
    AlreadyConnectedError,
    ConfigError,
    ConnectError,
    MultimodalLiveError,
    NotConnectedError,
)
from .models import (
    LiveConfig,
    LiveFunctionCall,
    LiveFunctionResponse,
    LiveGenerationConfig,
    ModelTurn,
    SpeechConfig,
    StreamingLog,
    ToolCall,
    ToolCallCancellation,
)
from .transport import GenaiLiveTransport, LiveCallbacks, LiveSessionHandle, LiveTransport

__all__ = [
    "AlreadyConnectedError",
    "AudioEvent",
    "CloseEvent",
    "ConfigError",
    "ConnectError",
    "ContentEvent",
    "Disconnected",
    "GenaiLiveTransport",
    "InterruptedEvent",
    "LiveCallbacks",
    "LiveConfig",
    "LiveEvent",
    "LiveFunctionCall",
    "LiveFunctionResponse",
    "LiveGenerationConfig",
    "LiveSessionHandle",
    "LiveTransport",
    "LogEvent",
    "ModelTurn",
    "MultimodalLiveClient",
    "MultimodalLiveError",
    "NotConnectedError",
    "Open",
    "OpenEvent",
    "SessionState",
    "SetupCompleteEvent",
    "SpeechConfig",
    "StreamingLog",
    "ToolCall",
    "ToolCallCancellation",
    "ToolCallCancellationEvent",
    "ToolCallEvent",
    "TurnCompleteEvent",
]
