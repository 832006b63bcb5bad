"""
Shopping assistant engine: context extraction, guideline matching
and product suggestions for a conversational sales agent.
"""

__version__ = "0.1.0"
