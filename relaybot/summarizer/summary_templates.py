# relaybot/summarizer/summary_templates.py
from typing import List

from ..core.models import ChatMessage


class SummaryTemplates:
    CHAT_REPLY = "given user input: {content}, please respond in a funny way"
    CHUNK_SUMMARY = "Given a chunk of a news body text: {chunk}, please give a segment summary."

    def __init__(
        self,
        chat_persona: str = "You're a chatbot.",
        summary_persona: str = "As a news reporter AI,"
    ):
        self.chat_persona = chat_persona
        self.summary_persona = summary_persona

    def chat_prompt(self, content: str) -> List[ChatMessage]:
        """Prompt for a reply to a triggered command"""
        return [
            ChatMessage.system(self.chat_persona),
            ChatMessage.user(self.CHAT_REPLY.format(content=content))
        ]

    def chunk_summary_prompt(self, chunk_text: str) -> List[ChatMessage]:
        """Prompt for the summary of a single page chunk"""
        return [
            ChatMessage.system(self.summary_persona),
            ChatMessage.user(self.CHUNK_SUMMARY.format(chunk=chunk_text))
        ]
