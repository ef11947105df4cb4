"""
LLM prompts, completion client, agent and transcript archive
"""
