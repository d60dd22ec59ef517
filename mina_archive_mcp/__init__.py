"""
Mina archive node MCP server package.

This package exposes LLM-friendly tools that translate structured filters into
GraphQL queries against a Mina archive node. See DESIGN.md for full details.
"""
