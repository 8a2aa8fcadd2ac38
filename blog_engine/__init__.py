"""
SEO Blog Engine.
Keyword-driven blog generation, RankMath-style scoring and WordPress publishing.
"""

__version__ = "1.0.0"
