"""
Domain package - Core business logic with no external dependencies.

This package contains pure Python domain models, the letter of credit
transition engine and the approval rules that govern the workflow.
"""
