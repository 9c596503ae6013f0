"""
Infrastructure layer package.

Contains concrete implementations (adapters) of the ports
defined in the domain layer: the relational database, the stock
quote API, the LLM provider and credential handling.
"""
