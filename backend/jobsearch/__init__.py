"""
Job search worker.

Consumes job search requests from a durable queue, discovers postings,
extracts their descriptions, generates resume suggestions and stores
the results.
"""
