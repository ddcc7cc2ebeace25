"""Core federated search pipeline: fetch, parse, aggregate."""

from fedsearch.core.federated import FederatedSearch

__all__ = ["FederatedSearch"]
