"""
Exception hierarchy for the content intelligence pipeline
"""


class ContentIntelError(Exception):
    """Base exception for all content intelligence errors"""
    pass


class ScraperError(ContentIntelError):
    """Raised when a page cannot be scraped after all retries"""
    pass


class LLMServiceError(ContentIntelError):
    """Raised when the LLM or embedding backend call fails"""
    pass


class KnowledgeStoreError(ContentIntelError):
    """Raised for knowledge store lifecycle and persistence failures"""
    pass


class WorkflowError(ContentIntelError):
    """Raised when a workflow cannot be executed for a classified intent"""
    pass
