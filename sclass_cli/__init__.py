"""sclass: Solidity to Mermaid class diagrams."""

__version__ = "0.3.0"
