"""
Web layer for the Support Q&A Bot.
"""
