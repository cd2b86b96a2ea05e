"""
Personal blog backend: posts, threaded comments, likes, media and OAuth sessions.
"""
__version__ = "1.0.0"
