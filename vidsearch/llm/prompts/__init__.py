"""
Prompt templates, one module per LLM task
"""
