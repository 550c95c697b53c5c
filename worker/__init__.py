"""
Job worker program
"""
