from typing_extensions import Protocol

from .models.launch import SessionState

CODE_VERIFIER_KEY = "code_verifier"
ISSUER_KEY = "iss"
ACCESS_TOKEN_KEY = "access_token"
PATIENT_KEY = "patient"
STATE_KEY = "state"


class SessionStore(Protocol):
    """Key-value store that survives the redirect to the authorization server.

    There is no expiry, encryption or namespacing, values are plain strings.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def clear(self) -> None:
        """Remove every key (logout)."""
        ...


class MemorySessionStore:
    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def clear(self) -> None:
        self.data.clear()


def read_session_state(store: SessionStore) -> SessionState:
    return SessionState(
        issuer=store.get(ISSUER_KEY),
        code_verifier=store.get(CODE_VERIFIER_KEY),
        access_token=store.get(ACCESS_TOKEN_KEY),
        patient_id=store.get(PATIENT_KEY),
        state=store.get(STATE_KEY),
    )
