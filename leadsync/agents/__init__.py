from leadsync.agents.reply_agent import ReplyAgent

__all__ = ["ReplyAgent"]
