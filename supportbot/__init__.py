"""
Retrieval and prompting core for the Support Q&A Bot.
"""

from supportbot.pipeline import SupportChatPipeline

__all__ = ["SupportChatPipeline"]
