"""
FastAPI application
"""
