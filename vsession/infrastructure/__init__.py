"""
Infrastructure collaborators
"""
