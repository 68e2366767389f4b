"""
Emoji indexing and relevance scoring package.

This package provides the pure-Python search stack:
- analyzers: Tokenizers and filters (lowercase, stop, stemming)
- emoji_tokenizer: Emoji keyword lookup and canonical characters
- stats: TF-IDF statistics
- relevance_index: Term vectors and document frequencies
- scoring: TF-IDF and substring overlap measures
- geo: Bounding-box and circular geofences
- policy: Result filtering, ordering and truncation
- storage: JSON snapshot persistence
"""
