"""Membership aggregation service for Azure DevOps identity data.

Flattens organization → project → group → member into row records behind a
Redis cache-aside layer.
"""
