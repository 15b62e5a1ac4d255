from abc import ABC, abstractmethod

from receptionist.domain.entities.conversation_state import ConversationState


class ConversationStorePort(ABC):
    @abstractmethod
    def get_state(self, session_id: str) -> ConversationState:
        raise NotImplementedError

    @abstractmethod
    def set_state(self, session_id: str, state: ConversationState) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete_state(self, session_id: str) -> None:
        """
        Drop the session record (call ended or session reset).
        Deleting an unknown session is a no-op.
        """
        raise NotImplementedError
