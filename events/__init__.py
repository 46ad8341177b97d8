"""
Public event mapping for broadcast.
"""
