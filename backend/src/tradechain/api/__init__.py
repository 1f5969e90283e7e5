"""
API package - HTTP surface for participants and letters of credit.
"""
