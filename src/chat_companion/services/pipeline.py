"""Wiring of the pipeline services around one store and one oracle."""

from dataclasses import dataclass

from chat_companion.core.config import PipelineConfig
from chat_companion.domain.models.utils import utc_now
from chat_companion.infrastructure.repositories.chats import ChatRepository
from chat_companion.infrastructure.repositories.context import ContextRepository
from chat_companion.infrastructure.repositories.messages import MessageRepository
from chat_companion.services import Clock, DocumentStore, TextOracle
from chat_companion.services.context_recorder import ContextRecorder
from chat_companion.services.context_retriever import ContextWindowRetriever
from chat_companion.services.importance import ImportanceClassifier
from chat_companion.services.refinement import RefinementGenerator
from chat_companion.services.reminders import ReminderOrchestrator
from chat_companion.services.suggestions import SuggestedReplyGenerator


@dataclass
class ChatPipeline:
    config: PipelineConfig
    chats: ChatRepository
    messages: MessageRepository
    contexts: ContextRepository
    classifier: ImportanceClassifier
    recorder: ContextRecorder
    retriever: ContextWindowRetriever
    reminders: ReminderOrchestrator
    suggestions: SuggestedReplyGenerator
    refinement: RefinementGenerator


def build_pipeline(
    store: DocumentStore,
    oracle: TextOracle,
    config: PipelineConfig | None = None,
    clock: Clock = utc_now,
) -> ChatPipeline:
    config = config or PipelineConfig()
    chats = ChatRepository(store)
    messages = MessageRepository(store)
    contexts = ContextRepository(store)
    classifier = ImportanceClassifier(config.trigger_phrases)
    retriever = ContextWindowRetriever(contexts, config, clock=clock)

    return ChatPipeline(
        config=config,
        chats=chats,
        messages=messages,
        contexts=contexts,
        classifier=classifier,
        recorder=ContextRecorder(classifier, contexts, config),
        retriever=retriever,
        reminders=ReminderOrchestrator(retriever, oracle, contexts, messages, config),
        suggestions=SuggestedReplyGenerator(oracle, config),
        refinement=RefinementGenerator(messages, oracle, config),
    )
