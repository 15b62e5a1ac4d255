from __future__ import annotations

from receptionist.application.ports.conversation_store import ConversationStorePort
from receptionist.domain.entities.conversation_state import ConversationState


class MemoryConversationStore(ConversationStorePort):
    def __init__(self) -> None:
        self._states: dict[str, ConversationState] = {}

    def get_state(self, session_id: str) -> ConversationState:
        return self._states.get(session_id, ConversationState())

    def set_state(self, session_id: str, state: ConversationState) -> None:
        self._states[session_id] = state

    def delete_state(self, session_id: str) -> None:
        self._states.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._states)
