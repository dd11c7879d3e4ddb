"""
Search indexing and query engine package.

This package provides a pure-Python TF-IDF search stack:
- analyzers: Tokenizer pipeline (lowercase, length, stopword, numeric filters)
- inverted_index: Term postings and document frequencies
- stats: TF and IDF helpers
- vectorizer: TF-IDF vectors for documents and queries
- similarity: Cosine similarity scoring
- storage: Key-value persistence of the index
- index_manager: Incremental indexing and persistence lifecycle
- query_engine: Ranked search
"""
