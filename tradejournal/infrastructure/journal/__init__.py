"""
Infrastructure adapters for the journal bounded context.

Each adapter implements a domain port (ABC) and connects
to external systems: databases, quote APIs, LLM APIs.
"""
