"""
Content intelligence: prompt-routed crawling, enrichment and knowledge-base Q&A
"""
__version__ = "1.0.0"
