"""
Tools used by the ingestion pipeline: image processing and AI classification.
"""
