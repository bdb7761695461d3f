# src/document_filing/agents/__init__.py

from .summary_agent import SummaryAgent, is_minimal_text
from .classification_agent import ClassificationAgent, fallback_classification
from .checklist_agent import ChecklistAgent, merge_checklist_matches, matches_from_filename
from .critic_agent import CriticAgent, should_run_critic, merge_critic_matches

__all__ = [
    "SummaryAgent",
    "is_minimal_text",
    "ClassificationAgent",
    "fallback_classification",
    "ChecklistAgent",
    "merge_checklist_matches",
    "matches_from_filename",
    "CriticAgent",
    "should_run_critic",
    "merge_critic_matches",
]
