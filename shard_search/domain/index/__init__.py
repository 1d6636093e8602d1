"""
Search index domain: shard data model, routing, matching and ranking.
"""
