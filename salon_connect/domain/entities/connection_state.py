from enum import Enum


class ConnectionState(str, Enum):
    disconnected = "disconnected"
    connecting = "connecting"
    connected = "connected"
    error = "error"  # reconnect attempts exhausted or initial connect failed
