"""Network configuration constants for the live quiz client."""

SERVER_URL: str = "http://localhost:8888"
API_URL: str = "http://localhost:8888/api"
API_TIMEOUT_SECONDS: float = 120.0

SOCKET_TRANSPORTS: list[str] = ["websocket", "polling"]
CONNECT_WAIT_TIMEOUT_SECONDS: int = 5
RECONNECT_ATTEMPTS: int = 5
RECONNECT_DELAY_SECONDS: float = 1.0
RECONNECT_DELAY_MAX_SECONDS: float = 5.0
