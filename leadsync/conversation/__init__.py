from leadsync.conversation.button_policy import ButtonPolicy
from leadsync.conversation.context_aggregator import ContextAggregator
from leadsync.conversation.interests import InterestExtractor
from leadsync.conversation.keyword_sets import KeywordSets
from leadsync.conversation.phase import PhaseClassifier
from leadsync.conversation.response_shaper import ResponseShaper

__all__ = [
    "ButtonPolicy",
    "ContextAggregator",
    "InterestExtractor",
    "KeywordSets",
    "PhaseClassifier",
    "ResponseShaper",
]
