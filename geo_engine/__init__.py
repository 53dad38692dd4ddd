"""
GEO Engine - Brand visibility in web-search-augmented LLM answers.

Turns a website URL into a structured report of how visible a brand is
in answers produced by a web-search-enabled LLM:

    1. Sitemap discovery and site crawling
    2. Content normalization
    3. Category and prompt generation
    4. Answer execution with citation extraction
    5. Brand mention, sentiment and metrics analysis
"""

__version__ = "1.0.0"
