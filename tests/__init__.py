"""
vSession test suite
"""
