"""
Workflow layer for deckshare.
High-level business operations that orchestrate models and services.
"""

from deckshare.db import Session
from deckshare.validation import StandardDeckValidator
from deckshare.workflows.publication import PublicationWorkflow

# Create workflow instances
publication_workflow = PublicationWorkflow(Session, StandardDeckValidator())

__all__ = [
    "publication_workflow",
    "PublicationWorkflow",
]
