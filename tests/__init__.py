"""
Photo GeoScene test suite.

Structure:
- unit/: projection math, tag normalization, classification, extraction, batching, frame and tiles
- integration/: archive-to-session pipeline and the HTTP service
- helpers.py: in-memory archives, scripted tag reader, GPS-tagged JPEGs
"""
