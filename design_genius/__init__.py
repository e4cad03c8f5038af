"""
DesignGenius: AI website modernization mockups

Turns a screenshot of an existing website, an optional URL, a short company
brief and an optional logo into modernized mobile and desktop mockups
rendered by the Gemini API.
"""

__version__ = "0.1.0"
