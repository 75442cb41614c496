"""
Shared data structures and statistical helpers
"""
