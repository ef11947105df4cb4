"""
Builder core: step controller, conversation models and store
"""

from .models import AnswerSet, Conversation, Turn, TurnKind
from .steps import QUESTIONS, AwaitingField, Ready, submit
from .store import ConversationStore

__all__ = [
    'AnswerSet',
    'Conversation',
    'Turn',
    'TurnKind',
    'QUESTIONS',
    'AwaitingField',
    'Ready',
    'submit',
    'ConversationStore',
]
