"""
Infrastructure package - Storage backends for letters and participants.
"""
