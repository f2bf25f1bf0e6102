"""
Asador POS backend
"""
